"""Context condition - single comparison evaluated against a resource instance."""

from dataclasses import dataclass
from typing import Any

from grantwise.domain.exceptions import ValidationError
from grantwise.domain.value_objects.condition_operator import ConditionOperator

USER_REFERENCE_PREFIX = "user."


@dataclass(frozen=True)
class ContextCondition:
    """Condition of a permission context.

    ``value_from`` is a dotted reference into the acting user's record
    (``user.customerId``); when it is absent ``value`` is used as a literal.
    """

    field: str
    operator: ConditionOperator
    value: Any = None
    value_from: str | None = None

    def __post_init__(self) -> None:
        if not self.field or not self.field.strip():
            raise ValidationError("Condition field is required")
        try:
            operator = ConditionOperator(self.operator)
        except ValueError:
            raise ValidationError(f"Unknown condition operator: {self.operator}") from None
        object.__setattr__(self, "operator", operator)
        if self.value is None and not self.value_from:
            raise ValidationError("Condition requires a value or valueFrom")

    @property
    def references_user(self) -> bool:
        return bool(self.value_from) and self.value_from.startswith(USER_REFERENCE_PREFIX)

    @property
    def user_path(self) -> str | None:
        """Path into the user record, without the ``user.`` prefix."""
        if not self.references_user:
            return None
        return self.value_from[len(USER_REFERENCE_PREFIX) :]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContextCondition":
        """Build from the stored / wire shape ``{field, operator, value, valueFrom}``."""
        return cls(
            field=data.get("field") or "",
            operator=data.get("operator") or "",
            value=data.get("value"),
            value_from=data.get("valueFrom") or data.get("value_from"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"field": self.field, "operator": self.operator.value}
        if self.value is not None:
            data["value"] = self.value
        if self.value_from:
            data["valueFrom"] = self.value_from
        return data
