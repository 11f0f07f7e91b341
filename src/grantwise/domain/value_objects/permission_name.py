"""Permission name - ``<resource>:<action>[:<qualifier>]``."""

from dataclasses import dataclass

from grantwise.domain.exceptions import ValidationError


@dataclass(frozen=True)
class PermissionName:
    """Parsed permission identifier."""

    resource: str
    action: str
    qualifier: str | None = None

    @classmethod
    def parse(cls, name: str) -> "PermissionName":
        """Parse and validate a permission name."""
        parts = name.strip().split(":") if name else []
        if len(parts) < 2 or not all(parts):
            raise ValidationError(f"Invalid permission name: {name!r}")
        qualifier = ":".join(parts[2:]) or None
        return cls(resource=parts[0], action=parts[1], qualifier=qualifier)

    @staticmethod
    def canonical(resource_type: str, action: str) -> str:
        """Name checked by a decision for ``resource_type`` and ``action``."""
        return f"{resource_type}:{action}"

    def __str__(self) -> str:
        base = f"{self.resource}:{self.action}"
        return f"{base}:{self.qualifier}" if self.qualifier else base
