# =============================================================================
# tests/test_app.py - HTTP Surface Tests
# =============================================================================
# Routes, request pipeline order, CORS policy, and the production-only
# static asset gateway.
# =============================================================================

import asyncio
from unittest.mock import AsyncMock

import pytest

from app.config import ConfigurationError
from app.main import create_app
from app.middleware import AuthSessionMiddleware, JSONBodyMiddleware, build_pipeline
from app.static import resolve_asset
from fastapi.middleware.cors import CORSMiddleware
from tests.conftest import CLIENT_ORIGIN, GOOD_TOKEN


# =============================================================================
# Health / Books
# =============================================================================

class TestHealth:
    """Test the liveness and readiness endpoints."""

    def test_health_returns_fixed_payload(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"msg": "Success from health"}

    def test_health_ignores_auth_state(self, client):
        """Test signed-in, signed-out and bad-token requests see the same payload."""
        signed_out = client.get("/health")
        signed_in = client.get("/health", headers={"Authorization": f"Bearer {GOOD_TOKEN}"})
        bad_token = client.get("/health", headers={"Authorization": "Bearer forged"})

        assert signed_out.json() == signed_in.json() == bad_token.json()
        assert bad_token.status_code == 200

    def test_health_is_get_only(self, client):
        assert client.post("/health").status_code == 405

    def test_readiness_reports_healthy_store(self, client, database):
        response = client.get("/health/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"
        database.ping.assert_called_once()

    def test_readiness_reports_degraded_store(self, client, database):
        database.ping.side_effect = RuntimeError("connection reset")

        response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert response.json()["database"].startswith("unhealthy")

    def test_books(self, client):
        response = client.get("/books")
        assert response.status_code == 200
        assert response.json() == {"msg": "this is the books endpoint"}


# =============================================================================
# Request Pipeline
# =============================================================================

class TestPipeline:
    """Test middleware ordering and the body parsing stage."""

    def test_stage_order(self, settings, verifier):
        stages = build_pipeline(settings, verifier)
        assert [stage.name for stage in stages] == ["json_body", "cors", "auth"]
        assert all(stage.reads and stage.writes for stage in stages)

    def test_installed_outermost_first(self, client):
        """Test the first stage is the outermost middleware."""
        installed = [middleware.cls for middleware in client.app.user_middleware]
        assert installed == [JSONBodyMiddleware, CORSMiddleware, AuthSessionMiddleware]

    def test_malformed_json_is_rejected(self, client):
        response = client.post(
            "/api/inngest",
            content=b'{"event": ',
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_JSON"

    def test_oversized_json_is_rejected(self, make_client, make_settings, job_tasks):
        client = make_client(make_settings(MAX_JSON_BODY_BYTES=64))

        response = client.post(
            "/api/inngest",
            json={"event": {"name": "clerk/user.deleted", "data": {"id": "x" * 100}}},
        )

        assert response.status_code == 413
        assert response.json()["code"] == "PAYLOAD_TOO_LARGE"
        job_tasks["delete"].delay.assert_not_called()

    def test_oversized_stream_stops_reading(self):
        """Test a body without Content-Length is cut off once past the limit."""
        inner = AsyncMock()
        middleware = JSONBodyMiddleware(inner, max_bytes=10)
        messages = [
            {"type": "http.request", "body": b"[1,2,3,", "more_body": True},
            {"type": "http.request", "body": b"4,5,6,7]", "more_body": True},
            {"type": "http.request", "body": b"never read", "more_body": False},
        ]
        receive = AsyncMock(side_effect=messages)
        sent = []

        async def send(message):
            sent.append(message)

        scope = {"type": "http", "path": "/api/inngest", "headers": [(b"content-type", b"application/json")]}
        asyncio.run(middleware(scope, receive, send))

        inner.assert_not_called()
        assert receive.await_count == 2
        assert sent[0]["status"] == 413

    def test_default_body_limit(self, settings):
        assert settings.MAX_JSON_BODY_BYTES == 100 * 1024

    def test_valid_json_reaches_handler(self, client, job_tasks):
        response = client.post(
            "/api/inngest",
            json={"event": {"name": "clerk/user.deleted", "data": {"id": "user_123"}}},
        )
        assert response.status_code == 202
        job_tasks["delete"].delay.assert_called_once_with({"id": "user_123"})

    def test_unexpected_errors_become_500(self, make_client, database):
        database.fetch_user_by_clerk_id.side_effect = RuntimeError("boom")
        client = make_client(raise_server_exceptions=False)

        response = client.get("/api/chat/token", headers={"Authorization": f"Bearer {GOOD_TOKEN}"})

        assert response.status_code == 500
        assert response.json() == {"detail": "An unexpected error occurred", "code": "INTERNAL_ERROR"}


# =============================================================================
# CORS
# =============================================================================

class TestCORS:
    """Test only the configured client origin may send credentialed requests."""

    def test_configured_origin_allowed_with_credentials(self, client):
        response = client.get("/health", headers={"Origin": CLIENT_ORIGIN})

        assert response.headers["access-control-allow-origin"] == CLIENT_ORIGIN
        assert response.headers["access-control-allow-credentials"] == "true"

    def test_other_origin_gets_no_allow_header(self, client):
        response = client.get("/health", headers={"Origin": "https://evil.example.com"})

        assert response.status_code == 200
        assert "access-control-allow-origin" not in response.headers

    def test_preflight_from_configured_origin(self, client):
        response = client.options(
            "/api/chat/token",
            headers={
                "Origin": CLIENT_ORIGIN,
                "Access-Control-Request-Method": "GET",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == CLIENT_ORIGIN
        assert response.headers["access-control-allow-credentials"] == "true"

    def test_preflight_from_other_origin_rejected(self, client):
        response = client.options(
            "/api/chat/token",
            headers={
                "Origin": "https://evil.example.com",
                "Access-Control-Request-Method": "GET",
            },
        )
        assert response.status_code == 400
        assert response.headers.get("access-control-allow-origin") != "https://evil.example.com"


# =============================================================================
# Static Asset Gateway
# =============================================================================

class TestNotProduction:
    """Test unknown paths outside production are plain 404s."""

    @pytest.mark.parametrize("path", ["/problems", "/some/deep/link", "/index.html"])
    def test_unknown_path_is_not_found(self, client, path):
        response = client.get(path)

        assert response.status_code == 404
        assert response.json() == {"detail": "Not Found"}


class TestProduction:
    """Test the bundle is served, with index.html as the fallback."""

    @pytest.fixture
    def prod_client(self, make_client, make_settings, frontend_dist):
        settings = make_settings(NODE_ENV="production", FRONTEND_DIST_DIR=str(frontend_dist))
        return make_client(settings)

    @pytest.mark.parametrize("path", ["/", "/problems", "/some/deep/link", "/api-ish/thing"])
    def test_unmatched_path_returns_entry_document(self, prod_client, path):
        response = prod_client.get(path)

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "arena" in response.text

    def test_fallback_is_idempotent(self, prod_client):
        first = prod_client.get("/problems")
        second = prod_client.get("/problems")
        assert first.content == second.content

    def test_existing_asset_is_served(self, prod_client):
        response = prod_client.get("/assets/app.js")
        assert response.status_code == 200
        assert response.text == "console.log('arena');"

    def test_api_routes_take_precedence(self, prod_client):
        response = prod_client.get("/health")
        assert response.json() == {"msg": "Success from health"}

    @pytest.mark.parametrize("path", ["/%00", "/" + "a" * 300, "/assets/" + "b" * 300 + ".js"])
    def test_unusable_file_names_return_entry_document(self, prod_client, path):
        response = prod_client.get(path)

        assert response.status_code == 200
        assert "arena" in response.text

    @pytest.mark.parametrize("method, path", [
        ("POST", "/nope"),
        ("DELETE", "/api/chat/x"),
        ("PUT", "/problems"),
    ])
    def test_non_read_methods_on_unmatched_paths_are_not_found(self, prod_client, method, path):
        response = prod_client.request(method, path)

        assert response.status_code == 404
        assert response.json() == {"detail": "Not Found"}

    def test_head_serves_entry_document(self, prod_client):
        response = prod_client.head("/problems")
        assert response.status_code == 200

    def test_missing_bundle_fails_startup(self, make_settings, database, verifier, stream, job_registry, tmp_path):
        settings = make_settings(NODE_ENV="production", FRONTEND_DIST_DIR=str(tmp_path / "missing"))

        with pytest.raises(ConfigurationError) as exc_info:
            create_app(settings, database=database, verifier=verifier, stream=stream, job_registry=job_registry)

        assert exc_info.value.invalid == ["FRONTEND_DIST_DIR"]


class TestResolveAsset:
    """Test mapping URL paths to bundle files."""

    def test_existing_file(self, frontend_dist):
        assert resolve_asset(frontend_dist.resolve(), "/assets/app.js") == (frontend_dist / "assets" / "app.js").resolve()

    def test_directory_is_not_an_asset(self, frontend_dist):
        assert resolve_asset(frontend_dist.resolve(), "/assets") is None

    def test_root_is_not_an_asset(self, frontend_dist):
        assert resolve_asset(frontend_dist.resolve(), "") is None

    def test_path_escaping_bundle_is_refused(self, frontend_dist):
        (frontend_dist.parent / "secret.txt").write_text("nope")
        assert resolve_asset(frontend_dist.resolve(), "../secret.txt") is None

    def test_nul_byte_is_not_an_asset(self, frontend_dist):
        assert resolve_asset(frontend_dist.resolve(), "/\x00") is None

    def test_overlong_segment_is_not_an_asset(self, frontend_dist):
        assert resolve_asset(frontend_dist.resolve(), "a" * 300) is None
