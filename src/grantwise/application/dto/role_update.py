"""Partial role update DTO."""

from dataclasses import dataclass, fields


@dataclass
class RoleUpdate:
    """Fields to change on a custom role. ``None`` leaves the field as is."""

    display_name: str | None = None
    description: str | None = None
    priority: int | None = None
    is_active: bool | None = None
    max_users: int | None = None
    requires_mfa: bool | None = None
    requires_approval: bool | None = None

    def changes(self) -> dict[str, object]:
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        return {name: value for name, value in values.items() if value is not None}
