"""Tests for the HTTP API."""

from datetime import date

import pytest

from sieledger.api.auth import create_token, decode_user_id
from sieledger.config.settings import Settings


def _upload(content: bytes, name="bokforing.se"):
    return {"file": (name, content, "text/plain")}


class TestAuth:
    """Bearer token handling."""

    def test_round_trip(self, test_settings):
        token = create_token("user-1", test_settings)
        assert decode_user_id(token, test_settings) == "user-1"

    def test_wrong_secret(self, test_settings):
        token = create_token("user-1", Settings(jwt_secret="other"))
        assert decode_user_id(token, test_settings) is None

    def test_audience_is_checked_when_configured(self, test_settings):
        strict = Settings(jwt_secret="test-secret", jwt_audience="authenticated")
        assert decode_user_id(create_token("user-1", strict), strict) == "user-1"
        token = create_token("user-1", test_settings, aud="someone-else")
        assert decode_user_id(token, strict) is None

    def test_token_without_subject(self, test_settings):
        import jwt

        token = jwt.encode({"role": "x"}, "test-secret", algorithm="HS256")
        assert decode_user_id(token, test_settings) is None

    @pytest.mark.parametrize(
        "method, path",
        [
            ("post", "/api/sie/import"),
            ("get", "/api/sie/export?year=2024"),
            ("get", "/api/monthly-close"),
            ("post", "/api/verifications"),
            ("get", "/api/verifications"),
        ],
    )
    def test_missing_token(self, api_client, method, path):
        response = getattr(api_client, method)(path)
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_invalid_token(self, api_client):
        response = api_client.get("/api/monthly-close", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    def test_unauthorized_import_writes_nothing(self, api_client, temp_db, sample_sie):
        response = api_client.post("/api/sie/import", files=_upload(sample_sie.encode("utf-8")))
        assert response.status_code == 401
        assert temp_db.list_transactions("user-1") == []


def test_healthz(api_client):
    response = api_client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


class TestSieImport:
    """POST /api/sie/import"""

    def test_import(self, api_client, auth_headers, sample_sie):
        response = api_client.post(
            "/api/sie/import", files=_upload(sample_sie.encode("utf-8")), headers=auth_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body == {
            "success": True,
            "stats": {
                "verifications": 2,
                "accounts": 3,
                "balances": 2,
                "transactionsInserted": 4,
                "accountBalancesInserted": 2,
                "period": "2024-01-01 – 2024-12-31",
            },
        }

    def test_pc8_file(self, api_client, auth_headers, temp_db, user_id, sample_sie):
        api_client.post(
            "/api/sie/import", files=_upload(sample_sie.encode("cp437")), headers=auth_headers
        )
        categories = {t.category for t in temp_db.list_transactions(user_id)}
        assert "Företagskonto" in categories

    def test_reimport(self, api_client, auth_headers, sample_sie):
        files = _upload(sample_sie.encode("utf-8"))
        api_client.post("/api/sie/import", files=files, headers=auth_headers)
        response = api_client.post(
            "/api/sie/import", files=_upload(sample_sie.encode("utf-8")), headers=auth_headers
        )
        assert response.json()["stats"]["transactionsInserted"] == 0
        assert "errors" not in response.json()

    def test_warnings_and_unbalanced(self, api_client, auth_headers, fixtures_dir):
        raw = (fixtures_dir / "broken.se").read_bytes()
        body = api_client.post("/api/sie/import", files=_upload(raw), headers=auth_headers).json()

        assert body["unbalanced"] == ["B7"]
        assert [w["line"] for w in body["warnings"]] == [4, 5, 11]

    def test_oversized_amount_is_a_warning(self, api_client, auth_headers, temp_db, user_id):
        raw = (
            "#RAR 0 20240101 20241231\r\n"
            '#VER A 1 20240110 "Kontant"\r\n{\r\n'
            "#TRANS 1930 {} 100.00\r\n#TRANS 3010 {} -100.00\r\n}\r\n"
            '#VER A 2 20240111 "Felaktig"\r\n{\r\n'
            "#TRANS 5010 {} 1e30\r\n}\r\n"
        ).encode("utf-8")
        response = api_client.post("/api/sie/import", files=_upload(raw), headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["stats"]["verifications"] == 2
        assert body["stats"]["transactionsInserted"] == 2
        assert [w["line"] for w in body["warnings"]] == [9]
        assert len(temp_db.list_transactions(user_id)) == 2

    def test_no_file(self, api_client, auth_headers):
        response = api_client.post("/api/sie/import", headers=auth_headers)
        assert response.status_code == 400
        assert response.json() == {"error": "No file provided"}


class TestSieExport:
    """GET /api/sie/export"""

    def test_export(self, api_client, auth_headers, sample_verifications):
        response = api_client.get("/api/sie/export?year=2024", headers=auth_headers)

        assert response.status_code == 200
        assert response.headers["content-type"] == "text/plain; charset=iso-8859-1"
        assert (
            response.headers["content-disposition"]
            == 'attachment; filename="bokforing_5566778899_2024.se"'
        )
        text = response.content.decode("iso-8859-1")
        assert text.startswith("#FLAGGA 0\r\n")
        assert '#FNAMN "Testbolaget AB"' in text
        assert text.count("#VER ") == 4

    def test_without_balances(self, api_client, auth_headers, temp_db, user_id, sample_verifications):
        from decimal import Decimal

        temp_db.upsert_account_balance(user_id, "1930", "2024-12", Decimal("100"))
        with_balances = api_client.get("/api/sie/export?year=2024", headers=auth_headers)
        without = api_client.get(
            "/api/sie/export?year=2024&includeOpeningBalances=false", headers=auth_headers
        )
        assert "#UB 0 1930 100.00" in with_balances.text
        assert "#UB" not in without.text

    @pytest.mark.parametrize(
        "query, message",
        [
            ("", "Missing required parameter: year"),
            ("?year=", "Missing required parameter: year"),
            ("?year=abc", "Invalid year parameter"),
            ("?year=1899", "Invalid year parameter"),
            ("?year=2101", "Invalid year parameter"),
        ],
    )
    def test_bad_year(self, api_client, auth_headers, query, message):
        response = api_client.get(f"/api/sie/export{query}", headers=auth_headers)
        assert response.status_code == 400
        assert response.json() == {"error": message}


class TestMonthlyClose:
    """GET and POST /api/monthly-close"""

    def test_summaries(self, api_client, auth_headers, sample_verifications):
        response = api_client.get("/api/monthly-close?year=2024", headers=auth_headers)
        assert response.status_code == 200
        body = response.json()

        assert body["year"] == 2024
        assert len(body["summaries"]) == 12
        january = body["summaries"][0]
        assert january == {
            "month": 1,
            "year": 2024,
            "period": "2024-01",
            "label": "Januari 2024",
            "verificationCount": 3,
            "revenue": 25000.0,
            "expenses": 11500.0,
            "result": 13500.0,
            "status": "open",
        }

    def test_year_defaults_to_current(self, api_client, auth_headers):
        body = api_client.get("/api/monthly-close", headers=auth_headers).json()
        assert body["year"] == date.today().year

    def test_close_and_reopen(self, api_client, auth_headers, sample_verifications):
        response = api_client.post(
            "/api/monthly-close",
            json={"year": 2024, "month": 1, "action": "close"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Januari 2024 stängd. 3 verifikationer låsta.",
            "affectedCount": 3,
        }
        summaries = api_client.get("/api/monthly-close?year=2024", headers=auth_headers).json()
        assert summaries["summaries"][0]["status"] == "closed"

        response = api_client.post(
            "/api/monthly-close",
            json={"year": 2024, "month": 1, "action": "reopen"},
            headers=auth_headers,
        )
        assert response.json()["message"] == "Januari 2024 öppnad. 3 verifikationer upplåsta."
        summaries = api_client.get("/api/monthly-close?year=2024", headers=auth_headers).json()
        assert summaries["summaries"][0]["status"] == "open"

    @pytest.mark.parametrize(
        "payload",
        [
            {"year": 2024, "month": 13, "action": "close"},
            {"year": 2024, "month": 0, "action": "close"},
            {"year": 2024, "month": 1, "action": "archive"},
            {"year": 2024, "action": "close"},
            {"month": 1, "action": "close"},
        ],
    )
    def test_bad_request(self, api_client, auth_headers, payload):
        response = api_client.post("/api/monthly-close", json=payload, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid request")

    def test_malformed_json(self, api_client, auth_headers):
        response = api_client.post(
            "/api/monthly-close",
            content=b"{not json",
            headers={**auth_headers, "Content-Type": "application/json"},
        )
        assert response.status_code == 400


class TestVerifications:
    """/api/verifications"""

    def _payload(self, **overrides):
        payload = {
            "date": "2024-03-01",
            "description": "Hyra mars",
            "rows": [
                {"account": "5010", "debit": "10000.00"},
                {"account": "1930", "credit": "10000.00"},
            ],
        }
        payload.update(overrides)
        return payload

    def test_create(self, api_client, auth_headers):
        response = api_client.post("/api/verifications", json=self._payload(), headers=auth_headers)
        assert response.status_code == 201
        verification_id = response.json()["id"]

        body = api_client.get(f"/api/verifications/{verification_id}", headers=auth_headers).json()
        assert body["series"] == "A"
        assert body["number"] == 1
        assert body["date"] == "2024-03-01"
        assert body["isLocked"] is False
        assert len(body["rows"]) == 2

    def test_unbalanced(self, api_client, auth_headers):
        payload = self._payload(
            rows=[{"account": "5010", "debit": "100"}, {"account": "1930", "credit": "90"}]
        )
        response = api_client.post("/api/verifications", json=payload, headers=auth_headers)
        assert response.status_code == 400
        assert "does not balance" in response.json()["error"]

    def test_duplicate_number(self, api_client, auth_headers):
        api_client.post("/api/verifications", json=self._payload(number=3), headers=auth_headers)
        response = api_client.post(
            "/api/verifications", json=self._payload(number=3), headers=auth_headers
        )
        assert response.status_code == 409

    def test_closed_month(self, api_client, auth_headers, sample_verifications):
        api_client.post(
            "/api/monthly-close",
            json={"year": 2024, "month": 1, "action": "close"},
            headers=auth_headers,
        )
        response = api_client.post(
            "/api/verifications", json=self._payload(date="2024-01-31"), headers=auth_headers
        )
        assert response.status_code == 409
        assert response.json() == {"error": "Period 2024-01 is closed"}

    def test_list_and_delete(self, api_client, auth_headers, sample_verifications):
        body = api_client.get(
            "/api/verifications?start=2024-02-01&end=2024-02-29", headers=auth_headers
        ).json()
        assert len(body["verifications"]) == 1

        verification_id = body["verifications"][0]["id"]
        response = api_client.delete(f"/api/verifications/{verification_id}", headers=auth_headers)
        assert response.status_code == 204
        response = api_client.get(f"/api/verifications/{verification_id}", headers=auth_headers)
        assert response.status_code == 404

    def test_other_user_cannot_see(self, api_client, test_settings, sample_verifications):
        headers = {"Authorization": f"Bearer {create_token('user-2', test_settings)}"}
        body = api_client.get("/api/verifications", headers=headers).json()
        assert body["verifications"] == []
