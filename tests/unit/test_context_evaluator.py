"""Unit tests for the context evaluator."""

from uuid import uuid4

import pytest

from grantwise.domain.entities import PermissionContext, User
from grantwise.domain.services import applies
from grantwise.domain.value_objects import ContextCondition


def _context(**condition) -> PermissionContext:
    return PermissionContext(
        id=uuid4(),
        name="ctx",
        resource_type="customer",
        condition=ContextCondition(**condition),
    )


@pytest.fixture
def user() -> User:
    return User(id="u1", attributes={"customerId": "C-7", "region": {"code": "north"}})


def test_equals_against_user_field(user: User) -> None:
    ctx = _context(field="customerId", operator="equals", value_from="user.customerId")
    assert applies(ctx, {"customerId": "C-7"}, user)
    assert not applies(ctx, {"customerId": "C-8"}, user)


def test_equals_normalizes_to_string(user: User) -> None:
    ctx = _context(field="tier", operator="equals", value="3")
    assert applies(ctx, {"tier": 3}, user)


def test_equals_booleans_compare_as_lowercase(user: User) -> None:
    ctx = _context(field="vip", operator="equals", value="true")
    assert applies(ctx, {"vip": True}, user)
    assert not applies(ctx, {"vip": False}, user)


def test_nested_resource_field(user: User) -> None:
    ctx = _context(field="owner.region", operator="equals", value_from="user.region.code")
    assert applies(ctx, {"owner": {"region": "north"}}, user)
    assert not applies(ctx, {"owner": {}}, user)


def test_contains_requires_collection(user: User) -> None:
    ctx = _context(field="tags", operator="contains", value="priority")
    assert applies(ctx, {"tags": ["normal", "priority"]}, user)
    assert not applies(ctx, {"tags": ["normal"]}, user)
    assert not applies(ctx, {"tags": "priority"}, user)


def test_greater_and_less_than(user: User) -> None:
    gt = _context(field="amount", operator="greaterThan", value=100)
    lt = _context(field="amount", operator="lessThan", value=100)
    assert applies(gt, {"amount": 150}, user)
    assert not applies(gt, {"amount": 100}, user)
    assert applies(lt, {"amount": 50}, user)
    assert not applies(lt, {"amount": "fifty"}, user)


@pytest.mark.parametrize(
    ("resource_value", "literal", "expected"),
    [
        ("150", 100, True),
        (150, "100", True),
        ("150.5", "150.25", True),
        ("9", "10", False),
        ("100", 100, False),
        ("true", 0, False),
        ("NaN", 0, False),
    ],
)
def test_greater_than_coerces_numeric_strings(
    user: User, resource_value, literal, expected: bool
) -> None:
    ctx = _context(field="amount", operator="greaterThan", value=literal)
    assert applies(ctx, {"amount": resource_value}, user) is expected


def test_non_numeric_strings_compare_as_text(user: User) -> None:
    ctx = _context(field="code", operator="lessThan", value="m")
    assert applies(ctx, {"code": "alpha"}, user)
    assert not applies(ctx, {"code": "zulu"}, user)


def test_missing_resource_field_is_false(user: User) -> None:
    ctx = _context(field="customerId", operator="equals", value="C-7")
    assert not applies(ctx, {"other": "C-7"}, user)


def test_missing_user_field_is_false() -> None:
    ctx = _context(field="customerId", operator="equals", value_from="user.customerId")
    assert not applies(ctx, {"customerId": "C-7"}, User(id="u2"))


def test_null_user_value_never_matches_null_resource_value() -> None:
    ctx = _context(field="customerId", operator="equals", value_from="user.customerId")
    user = User(id="u3", attributes={"customerId": None})
    assert not applies(ctx, {"customerId": None}, user)


def test_absent_resource_or_user_is_false(user: User) -> None:
    ctx = _context(field="customerId", operator="equals", value="C-7")
    assert not applies(ctx, None, user)
    assert not applies(ctx, {"customerId": "C-7"}, None)


def test_user_dataclass_fields_are_resolvable() -> None:
    ctx = _context(field="ownerId", operator="equals", value_from="user.id")
    assert applies(ctx, {"ownerId": "u9"}, User(id="u9"))
