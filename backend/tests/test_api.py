"""
Tessa Backend — API Tests
===========================

End-to-end requests through the ASGI app with the in-memory database and a
fake-backed audio agent (see the test_client fixture).

What we test:
    ✅ Public endpoints: /, /health, /api/plans
    ✅ Register → login → me, and every 401 path
    ✅ Project CRUD, quota (403) and owner isolation (404)
    ✅ Subscriptions raise the project quota
    ✅ Audio analyze → list → get → delete, plus 400/502 paths
    ✅ Error body format and X-Request-ID propagation
"""

import uuid

import pytest

from tessa.exceptions import IncompleteAnalysisError, TranscriptionFailedError
from tessa.schemas.audio import AudioAnalysisResult


class TestPublicEndpoints:
    @pytest.mark.asyncio
    async def test_root(self, test_client):
        response = await test_client.get("/")

        assert response.status_code == 200
        assert response.json()["message"] == "Welcome to Tessa API"

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["database"] == "connected"
        assert body["status"] in ("healthy", "degraded")

    @pytest.mark.asyncio
    async def test_plans(self, test_client):
        response = await test_client.get("/api/plans")

        plans = response.json()["plans"]
        assert [p["id"] for p in plans] == ["FREE", "PRO"]
        assert plans[1]["projects_quota"] == 10

    @pytest.mark.asyncio
    async def test_plans_in_spanish(self, test_client):
        response = await test_client.get("/api/plans", params={"locale": "es"})
        assert response.json()["plans"][0]["name"] == "Plan Gratuito"

    @pytest.mark.asyncio
    async def test_security_headers(self, test_client):
        response = await test_client.get("/")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "SAMEORIGIN"
        assert "Content-Security-Policy" in response.headers

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get("/", headers={"X-Request-ID": "trace-123"})
        assert response.headers["X-Request-ID"] == "trace-123"

    @pytest.mark.asyncio
    async def test_request_id_is_generated(self, test_client):
        response = await test_client.get("/")
        assert response.headers["X-Request-ID"]


class TestAuthFlow:
    @pytest.mark.asyncio
    async def test_register_login_me(self, test_client):
        register = await test_client.post(
            "/api/auth/register", json={"email": "Dana@Example.com", "password": "Secret123"}
        )
        assert register.status_code == 201
        assert register.json()["user"]["email"] == "dana@example.com"
        assert register.json()["user"]["plan"] == "FREE"
        assert "password_hash" not in register.json()["user"]

        login = await test_client.post(
            "/api/auth/login", json={"email": "dana@example.com", "password": "Secret123"}
        )
        assert login.status_code == 200
        token = login.json()["token"]

        me = await test_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["user"]["id"] == register.json()["user"]["id"]

    @pytest.mark.asyncio
    async def test_duplicate_registration_conflicts(self, test_client, register_user):
        await register_user("erin@example.com")

        response = await test_client.post(
            "/api/auth/register", json={"email": "erin@example.com", "password": "Secret123"}
        )

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("password", ["short1A", "alllowercase1", "ALLUPPERCASE1", "NoDigitsHere"])
    async def test_weak_password_rejected(self, test_client, password):
        response = await test_client.post(
            "/api/auth/register", json={"email": "weak@example.com", "password": password}
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_wrong_password(self, test_client, register_user):
        await register_user("fay@example.com")

        response = await test_client.post(
            "/api/auth/login", json={"email": "fay@example.com", "password": "Wrong1234"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_missing_token(self, test_client):
        response = await test_client.get("/api/auth/me")

        assert response.status_code == 401
        body = response.json()
        assert body["error"] == "unauthorized"
        assert body["message"] == "No token provided"
        assert body["request_id"]
        assert response.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_invalid_token(self, test_client):
        response = await test_client.get("/api/auth/me", headers={"Authorization": "Bearer nonsense"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid or expired token"


class TestProjects:
    @pytest.mark.asyncio
    async def test_crud(self, test_client, register_user):
        headers = await register_user("gil@example.com")

        created = await test_client.post("/api/projects", json={"name": "  Website  "}, headers=headers)
        assert created.status_code == 201
        project = created.json()["project"]
        assert project["name"] == "Website"

        listed = await test_client.get("/api/projects", headers=headers)
        assert [p["id"] for p in listed.json()["projects"]] == [project["id"]]

        renamed = await test_client.put(
            f"/api/projects/{project['id']}", json={"name": "Landing page"}, headers=headers
        )
        assert renamed.status_code == 200
        assert renamed.json()["project"]["name"] == "Landing page"

        deleted = await test_client.delete(f"/api/projects/{project['id']}", headers=headers)
        assert deleted.status_code == 204

        missing = await test_client.get(f"/api/projects/{project['id']}", headers=headers)
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_free_quota(self, test_client, register_user):
        headers = await register_user("hal@example.com")
        for i in range(3):
            response = await test_client.post("/api/projects", json={"name": f"P{i}"}, headers=headers)
            assert response.status_code == 201

        response = await test_client.post("/api/projects", json={"name": "P3"}, headers=headers)

        assert response.status_code == 403
        body = response.json()
        assert body["error"] == "quota_exceeded"
        assert body["details"] == {"plan": "FREE", "limit": 3}

    @pytest.mark.asyncio
    async def test_other_users_project_is_hidden(self, test_client, register_user):
        owner = await register_user("ivy@example.com")
        intruder = await register_user("jon@example.com")
        created = await test_client.post("/api/projects", json={"name": "Secret"}, headers=owner)
        project_id = created.json()["project"]["id"]

        assert (await test_client.get(f"/api/projects/{project_id}", headers=intruder)).status_code == 404
        assert (
            await test_client.put(f"/api/projects/{project_id}", json={"name": "x"}, headers=intruder)
        ).status_code == 404
        assert (await test_client.delete(f"/api/projects/{project_id}", headers=intruder)).status_code == 404
        assert (await test_client.get(f"/api/projects/{project_id}", headers=owner)).status_code == 200

    @pytest.mark.asyncio
    async def test_empty_name_rejected(self, test_client, register_user):
        headers = await register_user("kim@example.com")
        response = await test_client.post("/api/projects", json={"name": "   "}, headers=headers)
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_requires_token(self, test_client):
        assert (await test_client.get("/api/projects")).status_code == 401


class TestSubscriptions:
    @pytest.mark.asyncio
    async def test_upgrade_raises_quota(self, test_client, register_user):
        headers = await register_user("lea@example.com")

        current = await test_client.get("/api/subscriptions/current", headers=headers)
        assert current.json()["subscription"] is None

        created = await test_client.post("/api/subscriptions", json={"plan_id": "PRO"}, headers=headers)
        assert created.status_code == 201
        subscription = created.json()["subscription"]
        assert subscription["plan"] == "PRO"
        assert subscription["status"] == "paid"
        assert subscription["payment_intent_id"].startswith("pi_mock_")

        me = await test_client.get("/api/auth/me", headers=headers)
        assert me.json()["user"]["plan"] == "PRO"

        current = await test_client.get("/api/subscriptions/current", headers=headers)
        assert current.json()["subscription"]["payment_intent_id"] == subscription["payment_intent_id"]

        for i in range(4):
            response = await test_client.post("/api/projects", json={"name": f"P{i}"}, headers=headers)
            assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_free_plan_rejected(self, test_client, register_user):
        headers = await register_user("max@example.com")
        response = await test_client.post("/api/subscriptions", json={"plan_id": "FREE"}, headers=headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Cannot create subscription for FREE plan"

    @pytest.mark.asyncio
    async def test_second_pro_subscription_conflicts(self, test_client, register_user):
        headers = await register_user("ned@example.com")
        await test_client.post("/api/subscriptions", json={"plan_id": "PRO"}, headers=headers)

        response = await test_client.post("/api/subscriptions", json={"plan_id": "PRO"}, headers=headers)

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_unknown_plan_rejected(self, test_client, register_user):
        headers = await register_user("oli@example.com")
        response = await test_client.post("/api/subscriptions", json={"plan_id": "GOLD"}, headers=headers)
        assert response.status_code == 422


def _audio(content: bytes = b"fake audio bytes", filename: str = "memo.m4a") -> dict:
    return {"audio": (filename, content, "audio/mp4")}


class TestAudio:
    @pytest.mark.asyncio
    async def test_analyze_list_get_delete(self, test_client, register_user, fake_transcriber, fake_generator):
        headers = await register_user("pia@example.com")

        analyzed = await test_client.post("/api/audio/analyze", files=_audio(), headers=headers)
        assert analyzed.status_code == 201
        summary = analyzed.json()["audio_summary"]
        assert summary["title"] == fake_generator.result.title
        assert summary["keywords"] == fake_generator.result.keywords
        assert summary["transcript"] == fake_transcriber.transcript
        assert fake_transcriber.calls == [(b"fake audio bytes", "memo.m4a")]

        listed = await test_client.get("/api/audio", headers=headers)
        assert [s["id"] for s in listed.json()["summaries"]] == [summary["id"]]

        fetched = await test_client.get(f"/api/audio/{summary['id']}", headers=headers)
        assert fetched.status_code == 200
        assert fetched.json()["summary"]["summary"] == fake_generator.result.summary

        deleted = await test_client.delete(f"/api/audio/{summary['id']}", headers=headers)
        assert deleted.status_code == 204
        assert (await test_client.get(f"/api/audio/{summary['id']}", headers=headers)).status_code == 404

        # Deleting again is still a success
        assert (await test_client.delete(f"/api/audio/{summary['id']}", headers=headers)).status_code == 204

    @pytest.mark.asyncio
    async def test_summaries_are_private(self, test_client, register_user):
        owner = await register_user("quin@example.com")
        intruder = await register_user("rae@example.com")
        analyzed = await test_client.post("/api/audio/analyze", files=_audio(), headers=owner)
        summary_id = analyzed.json()["audio_summary"]["id"]

        assert (await test_client.get("/api/audio", headers=intruder)).json()["summaries"] == []
        assert (await test_client.get(f"/api/audio/{summary_id}", headers=intruder)).status_code == 404

        await test_client.delete(f"/api/audio/{summary_id}", headers=intruder)
        assert (await test_client.get(f"/api/audio/{summary_id}", headers=owner)).status_code == 200

    @pytest.mark.asyncio
    async def test_empty_upload_rejected(self, test_client, register_user, fake_transcriber):
        headers = await register_user("sam@example.com")

        response = await test_client.post("/api/audio/analyze", files=_audio(b""), headers=headers)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        assert fake_transcriber.calls == []

    @pytest.mark.asyncio
    async def test_pipeline_failure_is_502_and_stores_nothing(self, test_client, register_user, fake_transcriber):
        headers = await register_user("tia@example.com")
        fake_transcriber.error = TranscriptionFailedError(cause="service unavailable")

        response = await test_client.post("/api/audio/analyze", files=_audio(), headers=headers)

        assert response.status_code == 502
        body = response.json()
        assert body["error"] == "analysis_failed"
        assert "service unavailable" not in body["message"]
        assert (await test_client.get("/api/audio", headers=headers)).json()["summaries"] == []

    @pytest.mark.asyncio
    async def test_analysis_failure_stores_nothing(self, test_client, register_user, fake_generator):
        headers = await register_user("ugo@example.com")
        fake_generator.error = IncompleteAnalysisError(missing_fields=["summary"])

        response = await test_client.post("/api/audio/analyze", files=_audio(), headers=headers)

        assert response.status_code == 502
        assert (await test_client.get("/api/audio", headers=headers)).json()["summaries"] == []

    @pytest.mark.asyncio
    async def test_incomplete_analysis_stores_nothing(self, test_client, register_user, fake_generator):
        headers = await register_user("una@example.com")
        fake_generator.result = AudioAnalysisResult(title="Sin resumen", keywords=["a"], summary="")

        response = await test_client.post("/api/audio/analyze", files=_audio(), headers=headers)

        assert response.status_code == 502
        assert (await test_client.get("/api/audio", headers=headers)).json()["summaries"] == []

    @pytest.mark.asyncio
    async def test_requires_token(self, test_client):
        response = await test_client.post("/api/audio/analyze", files=_audio())
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_summary(self, test_client, register_user):
        headers = await register_user("uma@example.com")
        response = await test_client.get(f"/api/audio/{uuid.uuid4()}", headers=headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_malformed_summary_id(self, test_client, register_user):
        headers = await register_user("val@example.com")
        response = await test_client.get("/api/audio/not-a-uuid", headers=headers)
        assert response.status_code == 422
