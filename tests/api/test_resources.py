"""API resource tests."""

from uuid import uuid4

import pytest
from falcon.testing import TestClient

from grantwise.domain.entities import Role

from tests.api.conftest import ADMIN_ID, PLAIN_ID, SETTINGS_ADMIN_ID, as_user
from tests.conftest import World, customer_context_condition


class TestAuthentication:
    def test_unauthenticated_request_is_rejected(self, client: TestClient) -> None:
        result = client.simulate_post(
            "/v1/decisions", json={"resource_type": "customer", "action": "read"}
        )
        assert result.status_code == 401

    def test_health_is_open(self, client: TestClient) -> None:
        result = client.simulate_get("/v1/health")
        assert result.status_code == 200
        assert result.json["status"] == "ok"


class TestDecisions:
    def test_decide_for_caller(self, client: TestClient) -> None:
        result = client.simulate_post(
            "/v1/decisions",
            json={"resource_type": "customer", "action": "read"},
            headers=as_user(PLAIN_ID),
        )
        assert result.status_code == 200
        assert result.json["user_id"] == PLAIN_ID
        assert result.json["allow"] is True
        assert result.json["sources"] == ["operator"]

    def test_decide_for_other_user_and_instance(
        self, client: TestClient, api_world: World
    ) -> None:
        api_world.resources.add("customer", "123", customerId="C-1")
        result = client.simulate_post(
            "/v1/decisions",
            json={
                "user_id": PLAIN_ID,
                "resource_type": "customer",
                "action": "delete",
                "resource_id": 123,
            },
            headers=as_user(ADMIN_ID),
        )
        assert result.status_code == 200
        assert result.json["allow"] is False
        assert result.json["sources"] == []

    def test_decide_requires_action(self, client: TestClient) -> None:
        result = client.simulate_post(
            "/v1/decisions", json={"resource_type": "customer"}, headers=as_user(PLAIN_ID)
        )
        assert result.status_code == 400
        assert result.json["type"] == "ValidationError"

    def test_decide_unknown_user(self, client: TestClient) -> None:
        result = client.simulate_post(
            "/v1/decisions",
            json={"user_id": "ghost", "resource_type": "customer", "action": "read"},
            headers=as_user(ADMIN_ID),
        )
        assert result.status_code == 404

    def test_plain_caller_cannot_decide_for_other_user(self, client: TestClient) -> None:
        for user_id in (ADMIN_ID, "ghost"):
            result = client.simulate_post(
                "/v1/decisions",
                json={"user_id": user_id, "resource_type": "user", "action": "update:permission"},
                headers=as_user(PLAIN_ID),
            )
            assert result.status_code == 403
            assert "allow" not in result.json

    def test_explicit_own_user_id_needs_no_admin(self, client: TestClient) -> None:
        result = client.simulate_post(
            "/v1/decisions",
            json={"user_id": PLAIN_ID, "resource_type": "report", "action": "create"},
            headers=as_user(PLAIN_ID),
        )
        assert result.status_code == 200
        assert result.json["allow"] is True

    def test_body_must_be_object(self, client: TestClient) -> None:
        result = client.simulate_post("/v1/decisions", json=[1, 2], headers=as_user(PLAIN_ID))
        assert result.status_code == 400


class TestEffectivePermissions:
    def test_self_access(self, client: TestClient) -> None:
        result = client.simulate_get(
            f"/v1/users/{PLAIN_ID}/effective-permissions", headers=as_user(PLAIN_ID)
        )
        assert result.status_code == 200
        names = [p["name"] for p in result.json["permissions"]]
        assert names == ["customer:read", "report:create"]
        assert result.json["permissions"][0]["sources"] == [
            {"type": "role", "name": "Operator"}
        ]

    def test_other_user_requires_admin(self, client: TestClient) -> None:
        denied = client.simulate_get(
            f"/v1/users/{ADMIN_ID}/effective-permissions", headers=as_user(PLAIN_ID)
        )
        allowed = client.simulate_get(
            f"/v1/users/{PLAIN_ID}/effective-permissions", headers=as_user(ADMIN_ID)
        )
        assert denied.status_code == 403
        assert denied.json["type"] == "PermissionDenied"
        assert allowed.status_code == 200


class TestUserMutations:
    def test_grant_then_decide_then_revoke(self, client: TestClient, api_world: World) -> None:
        perm = api_world.permission("customer:export")
        decide_body = {"user_id": PLAIN_ID, "resource_type": "customer", "action": "export"}

        before = client.simulate_post("/v1/decisions", json=decide_body, headers=as_user(ADMIN_ID))
        granted = client.simulate_post(
            f"/v1/users/{PLAIN_ID}/grants",
            json={"permission_id": str(perm.id)},
            headers=as_user(ADMIN_ID),
        )
        after = client.simulate_post("/v1/decisions", json=decide_body, headers=as_user(ADMIN_ID))
        revoked = client.simulate_delete(
            f"/v1/users/{PLAIN_ID}/grants/{perm.id}", headers=as_user(ADMIN_ID)
        )
        final = client.simulate_post("/v1/decisions", json=decide_body, headers=as_user(ADMIN_ID))

        assert before.json["allow"] is False
        assert granted.status_code == 201
        assert granted.json["temporary"] is False
        assert after.json["allow"] is True
        assert after.json["sources"] == ["custom"]
        assert revoked.status_code == 204
        assert final.json["allow"] is False

    def test_temporary_grant(self, client: TestClient, api_world: World) -> None:
        perm = api_world.permission("report:export")
        result = client.simulate_post(
            f"/v1/users/{PLAIN_ID}/grants",
            json={
                "permission_id": str(perm.id),
                "temporary": True,
                "expires_in_seconds": 3600,
                "reason": "Quarter close",
            },
            headers=as_user(ADMIN_ID),
        )
        assert result.status_code == 201
        assert result.json["temporary"] is True
        assert result.json["reason"] == "Quarter close"
        assert perm.id in api_world.state(PLAIN_ID).temporary_grants

    def test_grant_requires_admin(self, client: TestClient, api_world: World) -> None:
        perm = api_world.permission("customer:export")
        result = client.simulate_post(
            f"/v1/users/{PLAIN_ID}/grants",
            json={"permission_id": str(perm.id)},
            headers=as_user(PLAIN_ID),
        )
        assert result.status_code == 403
        assert api_world.audit.events == []

    def test_grant_invalid_permission_id(self, client: TestClient) -> None:
        result = client.simulate_post(
            f"/v1/users/{PLAIN_ID}/grants",
            json={"permission_id": "not-a-uuid"},
            headers=as_user(ADMIN_ID),
        )
        assert result.status_code == 400

    def test_duplicate_denial_conflicts(self, client: TestClient, api_world: World) -> None:
        perm = api_world.permission("customer:read")
        path = f"/v1/users/{PLAIN_ID}/denials"
        body = {"permission_id": str(perm.id)}

        first = client.simulate_post(path, json=body, headers=as_user(ADMIN_ID))
        second = client.simulate_post(path, json=body, headers=as_user(ADMIN_ID))
        removed = client.simulate_delete(f"{path}/{perm.id}", headers=as_user(ADMIN_ID))

        assert first.status_code == 201
        assert second.status_code == 409
        assert removed.status_code == 204

    def test_assign_role(
        self, client: TestClient, api_world: World, operator_role: Role
    ) -> None:
        api_world.user("new-user")
        result = client.simulate_put(
            "/v1/users/new-user/role",
            json={"role_id": str(operator_role.id)},
            headers=as_user(ADMIN_ID),
        )
        assert result.status_code == 200
        assert result.json["status"] == "applied"
        assert api_world.state("new-user").role_id == operator_role.id

    def test_assign_unknown_role(self, client: TestClient) -> None:
        result = client.simulate_put(
            f"/v1/users/{PLAIN_ID}/role",
            json={"role_id": str(uuid4())},
            headers=as_user(ADMIN_ID),
        )
        assert result.status_code == 404
        assert "Role not found" in result.json["error"]

    def test_context_assignment_grants_on_matching_instance(
        self, client: TestClient, api_world: World
    ) -> None:
        ctx = api_world.context(
            "own_customers", "customer", customer_context_condition(), ["customer:update"]
        )
        api_world.resources.add("customer", "123", customerId="C-1")

        assigned = client.simulate_post(
            f"/v1/users/{PLAIN_ID}/contexts",
            json={"context_id": str(ctx.id)},
            headers=as_user(ADMIN_ID),
        )
        decision = client.simulate_post(
            "/v1/decisions",
            json={"resource_type": "customer", "action": "update", "resource_id": "123"},
            headers=as_user(PLAIN_ID),
        )
        removed = client.simulate_delete(
            f"/v1/users/{PLAIN_ID}/contexts/{ctx.id}", headers=as_user(ADMIN_ID)
        )

        assert assigned.status_code == 201
        assert decision.json["allow"] is True
        assert decision.json["sources"] == ["context:own_customers"]
        assert removed.status_code == 204

    def test_override_set_and_remove(self, client: TestClient, api_world: World) -> None:
        perm = api_world.permission("customer:delete")
        api_world.resources.add("customer", "123")

        put = client.simulate_put(
            f"/v1/users/{PLAIN_ID}/overrides",
            json={"resource_type": "customer", "resource_id": "123", "granted": [str(perm.id)]},
            headers=as_user(ADMIN_ID),
        )
        missing = client.simulate_put(
            f"/v1/users/{PLAIN_ID}/overrides",
            json={"resource_type": "customer", "resource_id": "999", "granted": [str(perm.id)]},
            headers=as_user(ADMIN_ID),
        )
        deleted = client.simulate_delete(
            f"/v1/users/{PLAIN_ID}/overrides/customer/123", headers=as_user(ADMIN_ID)
        )

        assert put.status_code == 200
        assert put.json["granted"] == [str(perm.id)]
        assert missing.status_code == 404
        assert deleted.status_code == 204
        assert api_world.state(PLAIN_ID).resource_overrides == {}


class TestRolesAndCatalog:
    def test_list_roles(self, client: TestClient) -> None:
        result = client.simulate_get("/v1/roles", headers=as_user(ADMIN_ID))
        assert result.status_code == 200
        assert {r["name"] for r in result.json["items"]} == {
            "admin",
            "platform_admin",
            "operator",
        }

    def test_create_role_requires_settings_permission(
        self, client: TestClient, api_world: World
    ) -> None:
        perm = api_world.permission("customer:read")
        body = {
            "name": "field_agent",
            "display_name": "Field agent",
            "permissions": [str(perm.id)],
            "restrictions": {"max_users": 3},
        }

        denied = client.simulate_post("/v1/roles", json=body, headers=as_user(ADMIN_ID))
        created = client.simulate_post("/v1/roles", json=body, headers=as_user(SETTINGS_ADMIN_ID))

        assert denied.status_code == 403
        assert created.status_code == 201
        assert created.json["restrictions"]["max_users"] == 3
        assert created.json["is_system"] is False

    def test_update_system_role_is_forbidden(
        self, client: TestClient, operator_role: Role
    ) -> None:
        result = client.simulate_put(
            f"/v1/roles/{operator_role.id}/permissions",
            json={"permissions": []},
            headers=as_user(SETTINGS_ADMIN_ID),
        )
        assert result.status_code == 403
        assert result.json["type"] == "PolicyViolation"

    def test_patch_role_deactivates_for_holders(
        self, client: TestClient, api_world: World
    ) -> None:
        role = api_world.role("field_agent", ["supplier:read"])
        api_world.user("agent-1", role)
        decide = {"resource_type": "supplier", "action": "read"}
        before = client.simulate_post("/v1/decisions", json=decide, headers=as_user("agent-1"))

        denied = client.simulate_patch(
            f"/v1/roles/{role.id}", json={"is_active": False}, headers=as_user(ADMIN_ID)
        )
        patched = client.simulate_patch(
            f"/v1/roles/{role.id}",
            json={"is_active": False, "restrictions": {"requires_approval": True}},
            headers=as_user(SETTINGS_ADMIN_ID),
        )
        after = client.simulate_post("/v1/decisions", json=decide, headers=as_user("agent-1"))

        assert before.json["allow"] is True
        assert denied.status_code == 403
        assert patched.status_code == 200
        assert patched.json["is_active"] is False
        assert patched.json["restrictions"]["requires_approval"] is True
        assert after.json["allow"] is False

    @pytest.mark.parametrize(
        "body",
        [{}, {"priority": "high"}, {"is_active": "no"}, {"restrictions": {"max_users": True}}],
    )
    def test_patch_role_validation(
        self, client: TestClient, api_world: World, body: dict
    ) -> None:
        role = api_world.role("field_agent")
        result = client.simulate_patch(
            f"/v1/roles/{role.id}", json=body, headers=as_user(SETTINGS_ADMIN_ID)
        )
        assert result.status_code == 400
        assert result.json["type"] == "ValidationError"

    def test_patch_system_role_is_forbidden(
        self, client: TestClient, operator_role: Role
    ) -> None:
        result = client.simulate_patch(
            f"/v1/roles/{operator_role.id}",
            json={"is_active": False},
            headers=as_user(SETTINGS_ADMIN_ID),
        )
        assert result.status_code == 403
        assert result.json["type"] == "PolicyViolation"

    def test_delete_role_in_use(self, client: TestClient, api_world: World) -> None:
        role = api_world.role("field_agent")
        api_world.user("agent-1", role)
        result = client.simulate_delete(f"/v1/roles/{role.id}", headers=as_user(SETTINGS_ADMIN_ID))
        assert result.status_code == 409

    def test_list_and_deactivate_permission(self, client: TestClient, api_world: World) -> None:
        perm = api_world.permission("customer:read")

        patched = client.simulate_patch(
            f"/v1/permissions/{perm.id}",
            json={"is_active": False},
            headers=as_user(SETTINGS_ADMIN_ID),
        )
        active = client.simulate_get(
            "/v1/permissions", params={"category": "customer"}, headers=as_user(ADMIN_ID)
        )
        everything = client.simulate_get(
            "/v1/permissions",
            params={"category": "customer", "include_inactive": "true"},
            headers=as_user(ADMIN_ID),
        )
        decision = client.simulate_post(
            "/v1/decisions",
            json={"resource_type": "customer", "action": "read"},
            headers=as_user(PLAIN_ID),
        )

        assert patched.status_code == 200
        assert patched.json["is_active"] is False
        assert active.json["items"] == []
        assert [p["name"] for p in everything.json["items"]] == ["customer:read"]
        assert decision.json["allow"] is False

    def test_patch_permission_requires_boolean(
        self, client: TestClient, api_world: World
    ) -> None:
        perm = api_world.permission("customer:read")
        result = client.simulate_patch(
            f"/v1/permissions/{perm.id}",
            json={"is_active": "no"},
            headers=as_user(SETTINGS_ADMIN_ID),
        )
        assert result.status_code == 400

    def test_create_and_list_contexts(self, client: TestClient, api_world: World) -> None:
        perm = api_world.permission("report:export")
        created = client.simulate_post(
            "/v1/contexts",
            json={
                "name": "own_reports",
                "resource_type": "report",
                "condition": {"field": "ownerId", "operator": "equals", "valueFrom": "user.id"},
                "permissions": [str(perm.id)],
            },
            headers=as_user(SETTINGS_ADMIN_ID),
        )
        invalid = client.simulate_post(
            "/v1/contexts",
            json={
                "name": "broken",
                "resource_type": "report",
                "condition": {"field": "ownerId", "operator": "matches", "value": "x"},
                "permissions": [str(perm.id)],
            },
            headers=as_user(SETTINGS_ADMIN_ID),
        )
        listed = client.simulate_get(
            "/v1/contexts", params={"resource_type": "report"}, headers=as_user(ADMIN_ID)
        )

        assert created.status_code == 201
        assert created.json["condition"]["valueFrom"] == "user.id"
        assert invalid.status_code == 400
        assert [c["name"] for c in listed.json["items"]] == ["own_reports"]


class TestMaintenance:
    def test_sweep(self, client: TestClient) -> None:
        result = client.simulate_post("/v1/maintenance/sweep", headers=as_user(SETTINGS_ADMIN_ID))
        assert result.status_code == 200
        assert result.json == {"users_updated": 0, "grants_removed": 0, "overrides_removed": 0}

    def test_sweep_requires_settings_permission(self, client: TestClient) -> None:
        result = client.simulate_post("/v1/maintenance/sweep", headers=as_user(ADMIN_ID))
        assert result.status_code == 403
