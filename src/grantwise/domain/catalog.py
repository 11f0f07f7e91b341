"""Default permission catalog and system roles."""

from dataclasses import dataclass, field

from grantwise.domain.entities import RoleRestrictions
from grantwise.domain.value_objects import PermissionCategory as C


@dataclass(frozen=True)
class PermissionSpec:
    name: str
    description: str
    category: C
    action: str
    resource: str
    requires_mfa: bool = False


@dataclass(frozen=True)
class RoleSpec:
    name: str
    display_name: str
    description: str
    priority: int
    permissions: tuple[str, ...]
    restrictions: RoleRestrictions = field(default_factory=RoleRestrictions)
    is_default: bool = False


def _crud(category: C, resource: str, label: str) -> list[PermissionSpec]:
    return [
        PermissionSpec(f"{resource}:create", f"Create {label}", category, "create", resource),
        PermissionSpec(f"{resource}:read", f"View {label}", category, "read", resource),
        PermissionSpec(f"{resource}:update", f"Update {label}", category, "update", resource),
        PermissionSpec(f"{resource}:delete", f"Delete {label}", category, "delete", resource),
        PermissionSpec(
            f"{resource}:manage", f"Manage all aspects of {label}", category, "manage", resource
        ),
    ]


DEFAULT_PERMISSIONS: tuple[PermissionSpec, ...] = (
    *_crud(C.SUPPLIER, "supplier", "suppliers"),
    PermissionSpec("supplier:read:performance", "View supplier performance data", C.SUPPLIER, "read", "performance"),
    PermissionSpec("supplier:read:risk", "View supplier risk data", C.SUPPLIER, "read", "risk"),
    PermissionSpec("supplier:update:risk", "Update supplier risk assessments", C.SUPPLIER, "update", "risk"),
    PermissionSpec("supplier:read:audit", "View supplier audits", C.SUPPLIER, "read", "audit"),
    PermissionSpec("supplier:create:audit", "Create supplier audits", C.SUPPLIER, "create", "audit"),
    PermissionSpec("supplier:export", "Export supplier data", C.SUPPLIER, "export", "supplier"),
    *_crud(C.CUSTOMER, "customer", "customers"),
    PermissionSpec("customer:export", "Export customer data", C.CUSTOMER, "export", "customer"),
    *_crud(C.INSPECTION, "inspection", "inspections"),
    PermissionSpec("inspection:schedule", "Schedule inspections", C.INSPECTION, "create", "schedule"),
    PermissionSpec("inspection:conduct", "Conduct inspections", C.INSPECTION, "execute", "inspection"),
    PermissionSpec("inspection:approve", "Approve inspection results", C.INSPECTION, "approve", "inspection"),
    PermissionSpec("inspection:export", "Export inspection reports", C.INSPECTION, "export", "inspection"),
    *_crud(C.REPORT, "report", "reports"),
    PermissionSpec("report:export", "Export reports", C.REPORT, "export", "report"),
    PermissionSpec("report:create:template", "Create report templates", C.REPORT, "create", "template"),
    *_crud(C.USER, "user", "users"),
    PermissionSpec("user:update:role", "Change user roles", C.USER, "update", "role", requires_mfa=True),
    PermissionSpec("user:update:permission", "Modify user permissions", C.USER, "update", "permission", requires_mfa=True),
    PermissionSpec("admin:system:settings", "Manage system settings", C.ADMIN, "manage", "settings", requires_mfa=True),
    PermissionSpec("admin:system:logs", "View system logs", C.ADMIN, "read", "logs"),
    PermissionSpec("admin:system:monitoring", "View system monitoring", C.ADMIN, "read", "monitoring"),
    PermissionSpec("dashboard:read", "View dashboards", C.DASHBOARD, "read", "dashboard"),
    PermissionSpec("dashboard:create", "Create custom dashboards", C.DASHBOARD, "create", "dashboard"),
    PermissionSpec("dashboard:share", "Share dashboards with others", C.DASHBOARD, "update", "share"),
    *_crud(C.DOCUMENT, "document", "documents"),
    PermissionSpec("document:approve", "Approve documents", C.DOCUMENT, "approve", "document"),
    *_crud(C.COMPONENT, "component", "components"),
)

SYSTEM_ROLES: tuple[RoleSpec, ...] = (
    RoleSpec(
        "superadmin",
        "Super Administrator",
        "Full system access with all permissions",
        1,
        ("*",),
        RoleRestrictions(max_users=2, requires_mfa=True),
    ),
    RoleSpec(
        "admin",
        "Administrator",
        "Administrative access with most permissions",
        10,
        (
            "user:manage", "user:read", "user:update:role", "user:update:permission",
            "customer:manage", "supplier:manage", "inspection:manage",
            "report:create", "report:export", "admin:system:settings", "admin:system:logs",
        ),
        RoleRestrictions(requires_mfa=True),
    ),
    RoleSpec(
        "manager",
        "Manager",
        "Management access with elevated permissions",
        20,
        (
            "user:read", "customer:manage", "supplier:manage", "inspection:manage",
            "report:create", "report:export", "admin:system:logs",
        ),
    ),
    RoleSpec(
        "supervisor",
        "Supervisor",
        "Supervisory access with team management permissions",
        30,
        ("customer:read", "supplier:read", "inspection:manage", "report:create", "report:export"),
    ),
    RoleSpec(
        "inspector",
        "Inspector",
        "Inspection and quality control permissions",
        40,
        ("customer:read", "supplier:read", "inspection:create", "inspection:approve", "report:create"),
    ),
    RoleSpec(
        "operator",
        "Operator",
        "Standard user with operational permissions",
        50,
        ("customer:read", "supplier:read", "inspection:create", "report:create"),
        is_default=True,
    ),
    RoleSpec(
        "viewer",
        "Viewer",
        "Read-only access to permitted resources",
        60,
        ("customer:read", "supplier:read", "report:read"),
    ),
    RoleSpec("guest", "Guest", "Limited access for external users", 100, ("report:read",)),
)
