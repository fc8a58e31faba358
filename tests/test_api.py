"""Tests for FastAPI endpoints."""

import pytest
from httpx import Client
from starlette.testclient import TestClient

from property_portfolio.api.app import create_app, get_db
from property_portfolio.repositories.sqlite import SQLiteDatabase

PASSWORD = "hemmeligt123"


@pytest.fixture
def test_db() -> SQLiteDatabase:
    """Create an in-memory test database with thread-safety disabled for testing."""
    db = SQLiteDatabase(":memory:", check_same_thread=False)
    db.initialize()
    return db


@pytest.fixture
def app(test_db: SQLiteDatabase):
    app = create_app()

    def override_get_db() -> SQLiteDatabase:
        return test_db

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
def anonymous(app) -> Client:
    return TestClient(app)


@pytest.fixture
def admin_client(app) -> Client:
    client = TestClient(app)
    response = client.post(
        "/api/setup",
        json={
            "organizationName": "Ejendomsgruppen ApS",
            "name": "Anne Admin",
            "email": "anne@example.dk",
            "password": PASSWORD,
        },
    )
    assert response.status_code == 201
    return client


@pytest.fixture
def invite(app, admin_client):
    """Invite a user with the given role, accept, and return a logged-in client."""

    def _invite(role: str, email: str, company_id: str | None = None) -> Client:
        response = admin_client.post(
            "/api/users/invite",
            json={"email": email, "role": role, "assignedCompanyId": company_id},
        )
        assert response.status_code == 201
        token = response.json()["invitation"]["token"]

        client = TestClient(app)
        accepted = client.post(
            "/api/users/invitation/accept",
            json={"token": token, "name": f"{role} bruger", "password": PASSWORD},
        )
        assert accepted.status_code == 201
        assert client.post(
            "/api/auth/login", json={"email": email, "password": PASSWORD}
        ).status_code == 200
        return client

    return _invite


def _company(client: Client, name: str) -> str:
    response = client.post("/api/companies", json={"name": name})
    assert response.status_code == 201
    return response.json()["id"]


def _relation(client: Client, parent: str, child: str, pct: str):
    return client.post(
        "/api/company-relations",
        json={"parentCompanyId": parent, "childCompanyId": child, "ownershipPercentage": pct},
    )


def _property(client: Client, name: str, owner: str | None = None, price: int = 1000000) -> str:
    response = client.post(
        "/api/properties",
        json={
            "name": name,
            "address": "Vestergade 1",
            "postalCode": "8000",
            "city": "Aarhus",
            "acquisitionPrice": price,
            "ownerCompanyId": owner,
        },
    )
    assert response.status_code == 201, response.json()
    return response.json()["id"]


class TestHealthEndpoint:
    def test_health_check_returns_ok(self, anonymous: Client) -> None:
        response = anonymous.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestSetupAndAuth:
    def test_setup_is_always_available(self, anonymous: Client) -> None:
        assert anonymous.get("/api/setup/needed").json() == {"needed": True}

    def test_setup_signs_in(self, admin_client: Client) -> None:
        response = admin_client.get("/api/auth/me")
        assert response.status_code == 200
        data = response.json()
        assert data["role"] == "admin"
        assert data["dashboardViewMode"] == "total"
        assert "passwordHash" not in data

    def test_unauthenticated_request_is_401(self, anonymous: Client) -> None:
        response = anonymous.get("/api/companies")
        assert response.status_code == 401
        assert response.json()["message"] == "Ikke autoriseret"

    def test_bearer_token(self, anonymous: Client, admin_client: Client) -> None:
        token = anonymous.post(
            "/api/auth/login", json={"email": "anne@example.dk", "password": PASSWORD}
        ).json()["token"]

        response = anonymous.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200

    def test_bad_login(self, anonymous: Client, admin_client: Client) -> None:
        response = anonymous.post(
            "/api/auth/login", json={"email": "anne@example.dk", "password": "forkert-kode"}
        )
        assert response.status_code == 401

    def test_logout(self, admin_client: Client) -> None:
        assert admin_client.post("/api/auth/logout").status_code == 200
        assert admin_client.get("/api/auth/me").status_code == 401

    def test_preferences(self, admin_client: Client) -> None:
        response = admin_client.put(
            "/api/user/preferences", json={"dashboardViewMode": "weighted"}
        )
        assert response.status_code == 200
        assert response.json()["dashboardViewMode"] == "weighted"

        bad = admin_client.put("/api/user/preferences", json={"dashboardViewMode": "x"})
        assert bad.status_code == 400


class TestRequestValidation:
    def test_malformed_body_is_400(self, admin_client: Client) -> None:
        response = admin_client.post("/api/company-relations", json={"parentCompanyId": "nope"})

        assert response.status_code == 400
        assert response.json()["message"].startswith("Valideringsfejl")

    def test_unknown_id_is_404(self, admin_client: Client) -> None:
        response = admin_client.get("/api/companies/00000000-0000-0000-0000-000000000000")

        assert response.status_code == 404
        assert response.json()["message"] == "Selskab ikke fundet"


class TestCompanyRelationEndpoints:
    def test_create_and_list(self, admin_client: Client) -> None:
        a, b = _company(admin_client, "A"), _company(admin_client, "B")

        response = _relation(admin_client, a, b, "60")

        assert response.status_code == 201
        assert response.json()["ownershipPercentage"] == "60.00"
        relations = admin_client.get(f"/api/companies/{b}/relations").json()
        assert [r["parentCompanyId"] for r in relations["parents"]] == [a]
        assert relations["children"] == []

    def test_limit_exceeded(self, admin_client: Client) -> None:
        a, b, child = (_company(admin_client, n) for n in ("A", "B", "Datter"))
        _relation(admin_client, a, child, "50")

        response = _relation(admin_client, b, child, "60")

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "OWNERSHIP_LIMIT_EXCEEDED"
        assert "110.00%" in data["message"]
        assert "50.00% ejerskab" in data["message"]

    def test_cycle_rejected(self, admin_client: Client) -> None:
        a, b = _company(admin_client, "A"), _company(admin_client, "B")
        _relation(admin_client, a, b, "60")

        response = _relation(admin_client, b, a, "10")

        assert response.status_code == 400
        assert response.json()["error"] == "OWNERSHIP_CYCLE"

    def test_update_percentage(self, admin_client: Client) -> None:
        a, b = _company(admin_client, "A"), _company(admin_client, "B")
        relation_id = _relation(admin_client, a, b, "60").json()["id"]

        response = admin_client.put(
            f"/api/company-relations/{relation_id}", json={"ownershipPercentage": "75.5"}
        )

        assert response.status_code == 200
        assert response.json()["ownershipPercentage"] == "75.50"


class TestRoles:
    def test_broker_cannot_write(self, invite) -> None:
        broker = invite("broker", "maegler@example.dk")

        response = broker.post("/api/companies", json={"name": "Forsøg"})

        assert response.status_code == 403
        assert response.json()["message"] == "Kun læseadgang (Mægler)"

    def test_user_sees_only_owned_properties(self, admin_client: Client, invite) -> None:
        a, b, d = (_company(admin_client, n) for n in ("A", "B", "D"))
        _relation(admin_client, a, b, "60")
        visible = _property(admin_client, "Synlig", owner=b)
        hidden = _property(admin_client, "Skjult", owner=d)
        user = invite("user", "bruger@example.dk", company_id=a)

        listed = [p["id"] for p in user.get("/api/properties").json()]

        assert listed == [visible]
        assert user.get(f"/api/properties/{hidden}").status_code == 404

    def test_weighted_dashboard(self, admin_client: Client, invite) -> None:
        a, b, c = (_company(admin_client, n) for n in ("A", "B", "C"))
        _relation(admin_client, a, b, "60")
        _relation(admin_client, b, c, "50")
        _property(admin_client, "Havnehuset", owner=c, price=1000000)
        user = invite("user", "bruger@example.dk", company_id=a)

        stats = user.get("/api/dashboard/stats").json()

        assert stats["mode"] == "weighted"
        assert stats["count"] == pytest.approx(0.3)
        assert stats["totalValue"] == "300000.00"
        assert stats["latestProperty"]["name"] == "Havnehuset"

    def test_total_dashboard_for_admin(self, admin_client: Client) -> None:
        _property(admin_client, "P1", price=100)
        _property(admin_client, "P2", price=200)

        stats = admin_client.get("/api/dashboard/stats").json()

        assert stats["mode"] == "total"
        assert stats["count"] == 2
        assert stats["totalValue"] == "300.00"
        assert len(admin_client.get("/api/dashboard/recent").json()) == 2

    def test_user_list_requires_admin_or_broker(self, admin_client: Client, invite) -> None:
        user = invite("user", "bruger@example.dk")

        assert admin_client.get("/api/users").status_code == 200
        assert user.get("/api/users").status_code == 403


class TestWriteScope:
    """A user rooted at A cannot change records owned outside A's graph."""

    @pytest.fixture
    def graph(self, admin_client: Client) -> dict[str, str]:
        a, b, d = (_company(admin_client, n) for n in ("A", "B", "D"))
        _relation(admin_client, a, b, "60")
        hidden = _property(admin_client, "Skjult", owner=d)
        lease = admin_client.post(
            "/api/leases",
            json={"propertyId": hidden, "name": "1. th", "type": "Bolig", "totalArea": 85},
        ).json()["id"]
        tenant = admin_client.post(
            "/api/tenants",
            json={
                "name": "Karen Jensen",
                "type": "privat",
                "email": "karen@example.dk",
                "phone": "12345678",
            },
        ).json()["id"]
        tenancy = admin_client.post(
            "/api/lease-tenants",
            json={
                "leaseId": lease,
                "tenantId": tenant,
                "rentAmount": "8500",
                "periodStart": "2023-01-01",
            },
        ).json()["id"]
        return {
            "a": a,
            "b": b,
            "d": d,
            "property": hidden,
            "lease": lease,
            "tenant": tenant,
            "tenancy": tenancy,
        }

    @pytest.fixture
    def user(self, invite, graph) -> Client:
        return invite("user", "bruger@example.dk", company_id=graph["a"])

    def test_update_hidden_property(self, admin_client: Client, user: Client, graph) -> None:
        response = user.put(f"/api/properties/{graph['property']}", json={"name": "Ændret"})

        assert response.status_code == 404
        assert response.json()["message"] == "Ejendom ikke fundet"
        assert user.put(f"/api/properties/{graph['property']}", json={}).status_code == 404
        assert admin_client.get(f"/api/properties/{graph['property']}").json()["name"] == "Skjult"

    def test_delete_hidden_property(self, admin_client: Client, user: Client, graph) -> None:
        assert user.delete(f"/api/properties/{graph['property']}").status_code == 404
        assert admin_client.get(f"/api/properties/{graph['property']}").status_code == 200

    def test_property_cannot_be_moved_outside_scope(self, user: Client, graph) -> None:
        own = _property(user, "Egen", owner=graph["b"])

        response = user.put(f"/api/properties/{own}", json={"ownerCompanyId": graph["d"]})

        assert response.status_code == 404
        assert response.json()["message"] == "Selskab ikke fundet"

    def test_create_property_for_hidden_owner(self, user: Client, graph) -> None:
        response = user.post(
            "/api/properties",
            json={
                "name": "Forsøg",
                "address": "Vestergade 1",
                "postalCode": "8000",
                "city": "Aarhus",
                "acquisitionPrice": 1000,
                "ownerCompanyId": graph["d"],
            },
        )

        assert response.status_code == 404

    def test_create_lease_on_hidden_property(self, admin_client: Client, user: Client, graph) -> None:
        response = user.post(
            "/api/leases",
            json={"propertyId": graph["property"], "name": "2. tv", "type": "Bolig"},
        )

        assert response.status_code == 404
        assert len(admin_client.get(f"/api/properties/{graph['property']}/leases").json()) == 1

    def test_update_hidden_lease(self, admin_client: Client, user: Client, graph) -> None:
        response = user.patch(f"/api/leases/{graph['lease']}", json={"name": "Ændret"})

        assert response.status_code == 404
        assert response.json()["message"] == "Lejemål ikke fundet"
        assert admin_client.get(f"/api/leases/{graph['lease']}").json()["name"] == "1. th"

    def test_delete_hidden_lease(self, admin_client: Client, user: Client, graph) -> None:
        assert user.delete(f"/api/leases/{graph['lease']}").status_code == 404
        assert admin_client.get(f"/api/leases/{graph['lease']}").status_code == 200

    def test_create_tenancy_on_hidden_lease(self, user: Client, graph) -> None:
        response = user.post(
            "/api/lease-tenants",
            json={
                "leaseId": graph["lease"],
                "tenantId": graph["tenant"],
                "rentAmount": "9000",
                "periodStart": "2040-01-01",
            },
        )

        assert response.status_code == 404

    def test_update_hidden_tenancy(self, admin_client: Client, user: Client, graph) -> None:
        response = user.patch(
            f"/api/lease-tenants/{graph['tenancy']}", json={"rentAmount": "1"}
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Lejekontrakt ikke fundet"
        listed = admin_client.get(f"/api/leases/{graph['lease']}/tenants").json()
        assert listed[0]["rentAmount"] == "8500.00"

    def test_delete_hidden_tenancy(self, admin_client: Client, user: Client, graph) -> None:
        assert user.delete(f"/api/lease-tenants/{graph['tenancy']}").status_code == 404
        assert len(admin_client.get("/api/all-lease-tenants").json()) == 1

    def test_hidden_tenancies_not_listed(self, user: Client, graph) -> None:
        assert user.get("/api/all-lease-tenants").json() == []
        assert user.get(f"/api/leases/{graph['lease']}/tenants").status_code == 404


class TestNullInUpdates:
    @pytest.fixture
    def lease_id(self, admin_client: Client) -> str:
        prop = _property(admin_client, "Havnehuset")
        return admin_client.post(
            "/api/leases",
            json={"propertyId": prop, "name": "1. th", "type": "Bolig", "totalArea": 85},
        ).json()["id"]

    def test_null_total_area_is_400(self, admin_client: Client, lease_id) -> None:
        response = admin_client.patch(f"/api/leases/{lease_id}", json={"totalArea": None})

        assert response.status_code == 400
        assert response.json()["message"] == "Valideringsfejl: totalArea"
        assert admin_client.get(f"/api/leases/{lease_id}").json()["totalArea"] == 85

    def test_null_optional_field_clears_it(self, admin_client: Client, lease_id) -> None:
        admin_client.patch(f"/api/leases/{lease_id}", json={"maxRentPerSqm": "1200"})

        response = admin_client.patch(f"/api/leases/{lease_id}", json={"maxRentPerSqm": None})

        assert response.status_code == 200
        assert response.json()["maxRentPerSqm"] is None

    def test_null_period_start_is_400(self, admin_client: Client, lease_id) -> None:
        tenant = admin_client.post(
            "/api/tenants",
            json={
                "name": "Karen Jensen",
                "type": "privat",
                "email": "karen@example.dk",
                "phone": "12345678",
            },
        ).json()["id"]
        tenancy = admin_client.post(
            "/api/lease-tenants",
            json={
                "leaseId": lease_id,
                "tenantId": tenant,
                "rentAmount": "8500",
                "periodStart": "2023-01-01",
            },
        ).json()["id"]

        response = admin_client.patch(
            f"/api/lease-tenants/{tenancy}", json={"periodStart": None}
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Valideringsfejl: periodStart"

    def test_null_property_name_is_400(self, admin_client: Client) -> None:
        prop = _property(admin_client, "Havnehuset")

        response = admin_client.put(f"/api/properties/{prop}", json={"name": None})

        assert response.status_code == 400


class TestTenantsAndTenancies:
    @pytest.fixture
    def lease_id(self, admin_client: Client) -> str:
        prop = _property(admin_client, "Havnehuset")
        response = admin_client.post(
            "/api/leases",
            json={"propertyId": prop, "name": "1. th", "type": "Bolig", "totalArea": 85},
        )
        assert response.status_code == 201
        assert response.json()["type"] == "Bolig"
        return response.json()["id"]

    @pytest.fixture
    def tenant_id(self, admin_client: Client) -> str:
        response = admin_client.post(
            "/api/tenants",
            json={
                "name": "Karen Jensen",
                "type": "privat",
                "email": "karen@example.dk",
                "phone": "12345678",
            },
        )
        assert response.status_code == 201
        assert response.json()["internalNumber"] == 1001
        return response.json()["id"]

    def test_broker_sees_anonymized_tenants(self, admin_client: Client, tenant_id, invite) -> None:
        broker = invite("broker", "maegler@example.dk")

        tenant = broker.get(f"/api/tenants/{tenant_id}").json()

        assert tenant["name"] == "Anonymiseret"
        assert tenant["email"] == "k*****@*****"
        assert admin_client.get(f"/api/tenants/{tenant_id}").json()["name"] == "Karen Jensen"

    def test_overlapping_tenancy_rejected(self, admin_client: Client, lease_id, tenant_id) -> None:
        first = admin_client.post(
            "/api/lease-tenants",
            json={
                "leaseId": lease_id,
                "tenantId": tenant_id,
                "rentAmount": "8500",
                "periodStart": "2023-01-01",
            },
        )
        assert first.status_code == 201
        assert first.json()["rentAmount"] == "8500.00"

        second = admin_client.post(
            "/api/lease-tenants",
            json={
                "leaseId": lease_id,
                "tenantId": tenant_id,
                "rentAmount": "9000",
                "periodStart": "2030-01-01",
            },
        )
        assert second.status_code == 400
        assert second.json()["error"] == "TENANCY_CONFLICT"

        closed = admin_client.patch(
            f"/api/lease-tenants/{first.json()['id']}", json={"periodEnd": "2029-12-31"}
        )
        assert closed.status_code == 200

        listed = admin_client.get(f"/api/leases/{lease_id}/tenants").json()
        assert listed[0]["tenant"]["name"] == "Karen Jensen"
        assert listed[0]["status"] == "Active"

    def test_end_before_start_rejected(self, admin_client: Client, lease_id, tenant_id) -> None:
        response = admin_client.post(
            "/api/lease-tenants",
            json={
                "leaseId": lease_id,
                "tenantId": tenant_id,
                "rentAmount": "8500",
                "periodStart": "2024-06-01",
                "periodEnd": "2024-05-01",
            },
        )
        assert response.status_code == 400
