"""Application DTOs."""

from grantwise.application.dto.effective_permissions import (
    EffectivePermission,
    EffectivePermissions,
)
from grantwise.application.dto.role_assignment import AssignmentStatus, RoleAssignmentResult
from grantwise.application.dto.role_update import RoleUpdate
from grantwise.application.dto.sweep_result import SweepResult

__all__ = [
    "AssignmentStatus",
    "EffectivePermission",
    "EffectivePermissions",
    "RoleAssignmentResult",
    "RoleUpdate",
    "SweepResult",
]
