"""Role assignment result DTO."""

from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID


class AssignmentStatus(StrEnum):
    """Outcome of a role assignment request."""

    APPLIED = "applied"
    PENDING_APPROVAL = "pending_approval"


@dataclass
class RoleAssignmentResult:
    """Result of AssignRoleUseCase."""

    user_id: str
    role_id: UUID
    status: AssignmentStatus
    previous_role_id: UUID | None = None
