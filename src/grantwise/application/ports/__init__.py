"""Application ports - interfaces for external adapters."""

from grantwise.application.ports.audit_sink import AuditEvent, AuditSink
from grantwise.application.ports.decision_cache import CacheGeneration, DecisionCache
from grantwise.application.ports.permission_resolver import PermissionResolver
from grantwise.application.ports.resource_store import ResourceStore
from grantwise.application.ports.unit_of_work import UnitOfWork

__all__ = [
    "AuditEvent",
    "AuditSink",
    "CacheGeneration",
    "DecisionCache",
    "PermissionResolver",
    "ResourceStore",
    "UnitOfWork",
]
