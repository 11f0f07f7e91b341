"""Unit tests for domain exceptions."""

import pytest

from grantwise.domain.exceptions import (
    CacheInvalidationError,
    Conflict,
    GrantwiseError,
    Inactive,
    NotFound,
    PermissionDenied,
    PolicyViolation,
    ResourceFetchTimeout,
    ValidationError,
)


@pytest.mark.parametrize(
    "error_type",
    [
        NotFound,
        Inactive,
        PolicyViolation,
        Conflict,
        ValidationError,
        ResourceFetchTimeout,
        CacheInvalidationError,
        PermissionDenied,
    ],
)
def test_errors_inherit_grantwise_error(error_type: type) -> None:
    assert issubclass(error_type, GrantwiseError)


def test_not_found_message_and_fields() -> None:
    """NotFound carries entity and key."""
    err = NotFound("Role", "abc")
    assert str(err) == "Role not found: abc"
    assert err.entity == "Role"
    assert err.key == "abc"


def test_inactive_message() -> None:
    assert str(Inactive("Permission", "customer:read")) == (
        "Permission is not active: customer:read"
    )


def test_resource_fetch_timeout_fields() -> None:
    err = ResourceFetchTimeout("customer", "c-1", 2.0)
    assert err.resource_type == "customer"
    assert err.resource_id == "c-1"
    assert err.timeout == 2.0
    assert "customer c-1" in str(err)


def test_raise_policy_violation_catchable_as_grantwise_error() -> None:
    with pytest.raises(GrantwiseError, match="Maximum users"):
        raise PolicyViolation("Maximum users for role superadmin reached")
