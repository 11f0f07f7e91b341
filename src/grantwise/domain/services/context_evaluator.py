"""Context evaluator - decides whether a conditional grant applies to a resource instance.

Pure functions only: no I/O, no clock, no shared state.
"""

from collections.abc import Callable, Mapping
from dataclasses import fields, is_dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from grantwise.domain.entities import PermissionContext, User
from grantwise.domain.value_objects import ConditionOperator

_MISSING = object()
_COLLECTION_TYPES = (list, tuple, set, frozenset)


def resolve_path(obj: Any, path: str) -> Any:
    """Walk a dotted path through mappings and attributes.

    Returns the module-level ``_MISSING`` sentinel when any segment is absent,
    so a present-but-``None`` value can be told apart from a missing field.
    """
    current = obj
    for part in path.split("."):
        if current is None:
            return _MISSING
        if isinstance(current, Mapping):
            if part not in current:
                return _MISSING
            current = current[part]
        elif hasattr(current, part):
            current = getattr(current, part)
        else:
            return _MISSING
    return current


def _user_field(user: User, path: str) -> Any:
    head = path.split(".", 1)[0]
    if is_dataclass(user) and head in {f.name for f in fields(user)}:
        return resolve_path(user, path)
    return resolve_path(user.attributes, path)


def _normalize(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _equals(resource_value: Any, comparison: Any) -> bool:
    if resource_value is None:
        return False
    return _normalize(resource_value) == _normalize(comparison)


def _contains(resource_value: Any, comparison: Any) -> bool:
    if not isinstance(resource_value, _COLLECTION_TYPES):
        return False
    target = _normalize(comparison)
    return any(item is not None and _normalize(item) == target for item in resource_value)


def _as_number(value: Any) -> Decimal | None:
    """Numbers and numeric strings as Decimal; None for anything else, booleans included."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float | Decimal):
        value = str(value)
    if not isinstance(value, str):
        return None
    try:
        number = Decimal(value.strip())
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def _ordered(resource_value: Any, comparison: Any) -> tuple[Any, Any]:
    left, right = _as_number(resource_value), _as_number(comparison)
    if left is not None and right is not None:
        return left, right
    return resource_value, comparison


def _greater_than(resource_value: Any, comparison: Any) -> bool:
    left, right = _ordered(resource_value, comparison)
    try:
        return bool(left > right)
    except TypeError:
        return False


def _less_than(resource_value: Any, comparison: Any) -> bool:
    left, right = _ordered(resource_value, comparison)
    try:
        return bool(left < right)
    except TypeError:
        return False


_OPERATORS: dict[ConditionOperator, Callable[[Any, Any], bool]] = {
    ConditionOperator.EQUALS: _equals,
    ConditionOperator.CONTAINS: _contains,
    ConditionOperator.GREATER_THAN: _greater_than,
    ConditionOperator.LESS_THAN: _less_than,
}


def applies(
    context: PermissionContext,
    resource: Mapping[str, Any] | None,
    user: User | None,
) -> bool:
    """Return True when ``context``'s condition holds for ``resource`` and ``user``."""
    if resource is None or user is None:
        return False
    condition = context.condition
    if condition is None or not condition.field or not condition.operator:
        return False

    resource_value = resolve_path(resource, condition.field)
    if resource_value is _MISSING:
        return False

    if condition.references_user:
        comparison = _user_field(user, condition.user_path)
    else:
        comparison = condition.value
    if comparison is _MISSING or comparison is None:
        return False

    compare = _OPERATORS.get(condition.operator)
    if compare is None:
        return False
    return compare(resource_value, comparison)
