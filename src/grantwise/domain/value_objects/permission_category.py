"""Permission catalog categories."""

from enum import StrEnum


class PermissionCategory(StrEnum):
    """Grouping used by the permission catalog."""

    SUPPLIER = "supplier"
    CUSTOMER = "customer"
    INSPECTION = "inspection"
    REPORT = "report"
    USER = "user"
    ADMIN = "admin"
    DASHBOARD = "dashboard"
    DOCUMENT = "document"
    COMPONENT = "component"
    SYSTEM = "system"
