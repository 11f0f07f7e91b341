"""Domain exceptions."""


class GrantwiseError(Exception):
    """Base exception for Grantwise."""

    pass


class NotFound(GrantwiseError):
    """Requested entity was not found."""

    def __init__(self, entity: str, key: object) -> None:
        super().__init__(f"{entity} not found: {key}")
        self.entity = entity
        self.key = key


class Inactive(GrantwiseError):
    """Target entity exists but is not active."""

    def __init__(self, entity: str, key: object) -> None:
        super().__init__(f"{entity} is not active: {key}")
        self.entity = entity
        self.key = key


class PolicyViolation(GrantwiseError):
    """Operation violates a role or permission restriction."""

    pass


class Conflict(GrantwiseError):
    """Operation conflicts with existing state (duplicate grant, role in use)."""

    pass


class ValidationError(GrantwiseError):
    """Validation failed for input data."""

    pass


class ResourceFetchTimeout(GrantwiseError):
    """Resource instance fetch exceeded its time bound."""

    def __init__(self, resource_type: str, resource_id: str, timeout: float) -> None:
        super().__init__(
            f"Fetching {resource_type} {resource_id} timed out after {timeout}s"
        )
        self.resource_type = resource_type
        self.resource_id = resource_id
        self.timeout = timeout


class CacheInvalidationError(GrantwiseError):
    """Decision cache could not be invalidated after a mutation."""

    pass


class PermissionDenied(GrantwiseError):
    """Caller does not have permission for the requested administrative action."""

    pass
