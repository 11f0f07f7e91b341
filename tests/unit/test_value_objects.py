"""Unit tests for domain value objects."""

import pytest

from grantwise.domain.exceptions import ValidationError
from grantwise.domain.value_objects import (
    ConditionOperator,
    ContextCondition,
    Decision,
    DecisionKey,
    PermissionName,
    SourceKind,
    SourceTag,
)


class TestPermissionName:
    def test_parse_two_segments(self) -> None:
        name = PermissionName.parse("customer:read")
        assert name.resource == "customer"
        assert name.action == "read"
        assert name.qualifier is None
        assert str(name) == "customer:read"

    def test_parse_with_qualifier(self) -> None:
        name = PermissionName.parse("user:update:permission")
        assert name.action == "update"
        assert name.qualifier == "permission"
        assert str(name) == "user:update:permission"

    @pytest.mark.parametrize("raw", ["", "customer", "customer:", ":read", "a::b"])
    def test_parse_rejects_malformed(self, raw: str) -> None:
        with pytest.raises(ValidationError):
            PermissionName.parse(raw)

    def test_canonical(self) -> None:
        assert PermissionName.canonical("user", "update:permission") == "user:update:permission"


class TestContextCondition:
    def test_operator_string_is_coerced(self) -> None:
        condition = ContextCondition(field="region", operator="equals", value="north")
        assert condition.operator is ConditionOperator.EQUALS

    def test_unknown_operator_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Unknown condition operator"):
            ContextCondition(field="region", operator="startsWith", value="n")

    def test_empty_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ContextCondition(field=" ", operator="equals", value="x")

    def test_missing_value_and_value_from_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ContextCondition(field="region", operator="equals")

    def test_user_reference(self) -> None:
        condition = ContextCondition(
            field="customerId", operator="equals", value_from="user.customerId"
        )
        assert condition.references_user
        assert condition.user_path == "customerId"

    def test_value_from_without_user_prefix_is_not_a_reference(self) -> None:
        condition = ContextCondition(field="x", operator="equals", value_from="org.id")
        assert not condition.references_user
        assert condition.user_path is None

    def test_from_dict_accepts_wire_shape(self) -> None:
        condition = ContextCondition.from_dict(
            {"field": "customerId", "operator": "equals", "valueFrom": "user.customerId"}
        )
        assert condition.value_from == "user.customerId"
        assert condition.to_dict() == {
            "field": "customerId",
            "operator": "equals",
            "valueFrom": "user.customerId",
        }


class TestDecision:
    def test_key_string_form(self) -> None:
        assert str(DecisionKey("u1", "customer", "read", "42")) == "decision:u1:customer:read:42"
        assert str(DecisionKey("u1", "customer", "read")) == "decision:u1:customer:read:*"

    def test_deny_has_no_sources(self) -> None:
        decision = Decision.deny()
        assert decision.allow is False
        assert decision.sources == ()

    def test_source_names(self) -> None:
        decision = Decision(
            allow=True,
            sources=(
                SourceTag(SourceKind.ROLE, "inspector"),
                SourceTag(SourceKind.CUSTOM),
                SourceTag(SourceKind.TEMPORARY, "Audit week"),
                SourceTag(SourceKind.CONTEXT, "own_customers"),
                SourceTag(SourceKind.OVERRIDE),
            ),
        )
        assert decision.source_names() == [
            "inspector",
            "custom",
            "temporary:Audit week",
            "context:own_customers",
            "override",
        ]
