"""Operators supported by permission context conditions."""

from enum import StrEnum


class ConditionOperator(StrEnum):
    """Comparison applied between a resource field and the condition value."""

    EQUALS = "equals"
    CONTAINS = "contains"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
