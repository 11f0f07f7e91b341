"""Domain value objects."""

from grantwise.domain.value_objects.condition_operator import ConditionOperator
from grantwise.domain.value_objects.context_condition import ContextCondition
from grantwise.domain.value_objects.decision import Decision, DecisionKey
from grantwise.domain.value_objects.permission_category import PermissionCategory
from grantwise.domain.value_objects.permission_name import PermissionName
from grantwise.domain.value_objects.source_tag import SourceKind, SourceTag

__all__ = [
    "ConditionOperator",
    "ContextCondition",
    "Decision",
    "DecisionKey",
    "PermissionCategory",
    "PermissionName",
    "SourceKind",
    "SourceTag",
]
