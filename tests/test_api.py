"""HTTP tests for the dividend and account endpoints.

Run with: pytest tests/test_api.py -v
"""
from fastapi.testclient import TestClient

from conftest import make_dividend_payload
from dividend_catalog.api import create_app


def _create(client, headers, **overrides) -> dict:
    response = client.post("/api/dividends", json=make_dividend_payload(**overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


# ─────────────────────────────────────────────────────────────────────────────
# 1. Public listing
# ─────────────────────────────────────────────────────────────────────────────

class TestListDividends:
    def test_listing_needs_no_auth(self, client):
        response = client.get("/api/dividends")
        assert response.status_code == 200
        assert response.json() == []

    def test_listing_ignores_auth_state(self, client, admin_headers, user_headers):
        _create(client, admin_headers)
        for headers in ({}, user_headers, admin_headers, {"Authorization": "Bearer garbage"}):
            response = client.get("/api/dividends", headers=headers)
            assert response.status_code == 200
            assert len(response.json()) == 1

    def test_seeded_app_lists_sample_records(self, settings):
        seeded = settings.model_copy(update={"seed_sample_data": True})
        client = TestClient(create_app(seeded))
        tickers = [d["ticker"] for d in client.get("/api/dividends").json()]
        assert tickers == ["SAMP", "COMB", "DFCC", "HNB", "CTC"]

    def test_get_single_record(self, client, admin_headers):
        created = _create(client, admin_headers)
        response = client.get(f"/api/dividends/{created['id']}")
        assert response.status_code == 200
        assert response.json() == created

    def test_get_missing_record_is_404(self, client):
        assert client.get("/api/dividends/99").status_code == 404


# ─────────────────────────────────────────────────────────────────────────────
# 2. Access gate on mutations
# ─────────────────────────────────────────────────────────────────────────────

class TestAccessGate:
    def test_unauthenticated_post_is_401(self, client):
        response = client.post("/api/dividends", json=make_dividend_payload())
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_non_admin_post_is_403(self, client, user_headers):
        response = client.post("/api/dividends", json=make_dividend_payload(), headers=user_headers)
        assert response.status_code == 403

    def test_invalid_token_is_401(self, client):
        headers = {"Authorization": "Bearer not-a-jwt"}
        response = client.post("/api/dividends", json=make_dividend_payload(), headers=headers)
        assert response.status_code == 401

    def test_auth_checked_before_body(self, client):
        response = client.post("/api/dividends", json={"established": 1500})
        assert response.status_code == 401

    def test_every_mutation_is_gated(self, client, admin_headers, user_headers):
        created = _create(client, admin_headers)
        path = f"/api/dividends/{created['id']}"
        calls = [
            ("patch", path, {"ticker": "X"}),
            ("post", f"{path}/year", {"year": 2024, "amount": "1.00"}),
            ("delete", path, None),
        ]
        for method, url, body in calls:
            kwargs = {"json": body} if body is not None else {}
            assert client.request(method, url, **kwargs).status_code == 401
            assert client.request(method, url, headers=user_headers, **kwargs).status_code == 403

        assert client.get(path).json() == created


# ─────────────────────────────────────────────────────────────────────────────
# 3. Create / update / delete
# ─────────────────────────────────────────────────────────────────────────────

class TestCreateDividend:
    def test_admin_creates_record(self, client, admin_headers):
        body = _create(client, admin_headers, dividendAmount=6.5)
        assert body["id"] == 1
        assert body["companyName"] == "Commercial Bank PLC"
        assert body["dividendAmount"] == "6.5"
        assert body["yearWiseData"] == ["2023:6.50", "2022:5.00"]
        assert body["yield"] is None
        assert body["lastUpdated"]

    def test_established_1500_is_400(self, client, admin_headers):
        response = client.post(
            "/api/dividends", json=make_dividend_payload(established=1500), headers=admin_headers
        )
        assert response.status_code == 400
        assert any(err["loc"][-1] == "established" for err in response.json()["detail"])
        assert client.get("/api/dividends").json() == []

    def test_client_timestamp_and_id_ignored(self, client, admin_headers):
        body = _create(client, admin_headers, id=77, lastUpdated="1999-01-01T00:00:00Z")
        assert body["id"] == 1
        assert not body["lastUpdated"].startswith("1999")


class TestUpdateDividend:
    def test_partial_update_merges(self, client, admin_headers):
        created = _create(client, admin_headers)
        response = client.patch(
            f"/api/dividends/{created['id']}", json={"sector": "Finance"}, headers=admin_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["sector"] == "Finance"
        assert body["ticker"] == created["ticker"]
        assert body["lastUpdated"] > created["lastUpdated"]

    def test_empty_patch_only_touches_timestamp(self, client, admin_headers):
        created = _create(client, admin_headers)
        body = client.patch(f"/api/dividends/{created['id']}", json={}, headers=admin_headers).json()
        assert {k: v for k, v in body.items() if k != "lastUpdated"} == {
            k: v for k, v in created.items() if k != "lastUpdated"
        }

    def test_patch_without_body_only_touches_timestamp(self, client, admin_headers):
        created = _create(client, admin_headers)
        response = client.patch(f"/api/dividends/{created['id']}", headers=admin_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["lastUpdated"] > created["lastUpdated"]
        assert {k: v for k, v in body.items() if k != "lastUpdated"} == {
            k: v for k, v in created.items() if k != "lastUpdated"
        }

    def test_update_missing_is_404(self, client, admin_headers):
        response = client.patch("/api/dividends/42", json={"ticker": "X"}, headers=admin_headers)
        assert response.status_code == 404
        assert response.json() == {"detail": "Dividend not found"}

    def test_invalid_partial_is_400(self, client, admin_headers):
        created = _create(client, admin_headers)
        response = client.patch(
            f"/api/dividends/{created['id']}", json={"frequency": "weekly"}, headers=admin_headers
        )
        assert response.status_code == 400
        assert client.get(f"/api/dividends/{created['id']}").json() == created

    def test_non_integer_id_is_400(self, client, admin_headers):
        response = client.patch("/api/dividends/abc", json={}, headers=admin_headers)
        assert response.status_code == 400


class TestAddYearData:
    def test_existing_year_is_replaced_and_appended(self, client, admin_headers):
        created = _create(client, admin_headers, yearWiseData=["2022:5.00", "2021:4.50"])
        response = client.post(
            f"/api/dividends/{created['id']}/year",
            json={"year": 2022, "amount": "7.00"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["yearWiseData"] == ["2021:4.50", "2022:7.00"]

    def test_new_year_is_appended(self, client, admin_headers):
        created = _create(client, admin_headers, yearWiseData=["2022:5.00"])
        body = client.post(
            f"/api/dividends/{created['id']}/year",
            json={"year": 2023, "amount": "6"},
            headers=admin_headers,
        ).json()
        assert body["yearWiseData"] == ["2022:5.00", "2023:6"]
        assert body["lastUpdated"] > created["lastUpdated"]

    def test_missing_record_is_404(self, client, admin_headers):
        response = client.post(
            "/api/dividends/9/year", json={"year": 2022, "amount": "1.00"}, headers=admin_headers
        )
        assert response.status_code == 404

    def test_invalid_body_is_400(self, client, admin_headers):
        created = _create(client, admin_headers)
        response = client.post(
            f"/api/dividends/{created['id']}/year",
            json={"year": "soon", "amount": "1.00"},
            headers=admin_headers,
        )
        assert response.status_code == 400


class TestDeleteDividend:
    def test_delete_returns_204_and_removes(self, client, admin_headers):
        created = _create(client, admin_headers)
        response = client.delete(f"/api/dividends/{created['id']}", headers=admin_headers)
        assert response.status_code == 204
        assert response.content == b""
        assert client.get("/api/dividends").json() == []

    def test_delete_is_idempotent(self, client, admin_headers):
        created = _create(client, admin_headers)
        for _ in range(2):
            response = client.delete(f"/api/dividends/{created['id']}", headers=admin_headers)
            assert response.status_code == 204

    def test_delete_unknown_id_is_204(self, client, admin_headers):
        assert client.delete("/api/dividends/555", headers=admin_headers).status_code == 204


# ─────────────────────────────────────────────────────────────────────────────
# 4. Accounts
# ─────────────────────────────────────────────────────────────────────────────

class TestAccounts:
    def test_register_returns_user_and_tokens(self, client):
        response = client.post("/api/register", json={"username": "alice", "password": "secret1"})
        assert response.status_code == 201
        body = response.json()
        assert body["user"]["username"] == "alice"
        assert body["user"]["id"] > 0
        assert body["user"]["isAdmin"] is False
        assert "password" not in body["user"]
        assert body["token_type"] == "bearer"

    def test_register_duplicate_is_400(self, client):
        client.post("/api/register", json={"username": "alice", "password": "secret1"})
        response = client.post("/api/register", json={"username": "alice", "password": "x"})
        assert response.status_code == 400
        assert response.json() == {"detail": "Username already exists"}

    def test_login_then_current_user(self, client):
        client.post("/api/register", json={"username": "alice", "password": "secret1"})
        tokens = client.post("/api/login", json={"username": "alice", "password": "secret1"}).json()

        response = client.get("/api/user", headers={"Authorization": f"Bearer {tokens['access_token']}"})
        assert response.status_code == 200
        assert response.json() == {"id": 1, "username": "alice", "isAdmin": False}

    def test_bad_login_is_401(self, client):
        response = client.post("/api/login", json={"username": "ghost", "password": "x"})
        assert response.status_code == 401

    def test_current_user_requires_auth(self, client):
        assert client.get("/api/user").status_code == 401

    def test_refresh_endpoint(self, client):
        tokens = client.post("/api/register", json={"username": "alice", "password": "secret1"}).json()
        response = client.post("/api/token/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert response.status_code == 200
        assert response.json()["access_token"]

    def test_users_are_admin_when_configured(self, settings):
        admin_default = settings.model_copy(update={"default_user_is_admin": True})
        client = TestClient(create_app(admin_default))
        body = client.post("/api/register", json={"username": "alice", "password": "secret1"}).json()
        assert body["user"]["isAdmin"] is True

        headers = {"Authorization": f"Bearer {body['access_token']}"}
        assert client.post("/api/dividends", json=make_dividend_payload(), headers=headers).status_code == 201

    def test_bootstrap_admin_can_mutate(self, settings):
        configured = settings.model_copy(update={"admin_username": "root", "admin_password": "rootpw"})
        client = TestClient(create_app(configured))
        tokens = client.post("/api/login", json={"username": "root", "password": "rootpw"}).json()
        headers = {"Authorization": f"Bearer {tokens['access_token']}"}
        assert client.post("/api/dividends", json=make_dividend_payload(), headers=headers).status_code == 201


class TestServiceEndpoints:
    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["dividends"] == 0

    def test_root(self, client):
        assert client.get("/").json()["status"] == "running"
