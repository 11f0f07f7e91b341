"""Loading helpers shared by the mutation use cases."""

from grantwise.application.ports import UnitOfWork
from grantwise.domain.entities import User, UserPermissionState
from grantwise.domain.exceptions import NotFound


async def load_user_state(uow: UnitOfWork, user_id: str) -> tuple[User, UserPermissionState]:
    """Return the user and their permission state, locked for the rest of the unit of work.

    An empty state is created if none exists.
    """
    state = await uow.permission_states.get_for_update(user_id)
    user = await uow.users.get_by_id(user_id)
    if user is None:
        raise NotFound("User", user_id)
    if state is None:
        state = UserPermissionState(user_id=user_id, role_id=user.role_id)
    return user, state
