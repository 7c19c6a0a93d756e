"""Tests for the rate limiting pure function and middleware integration."""

from docward.core.config import settings
from docward.middleware.request_context import check_rate_limit
from tests.conftest import auth_headers, make_document


class TestCheckRateLimit:
    """Unit tests for the pure function: no middleware, no HTTP."""

    def test_allows_within_limit(self):
        bucket: dict = {}
        allowed, retry = check_rate_limit(bucket, "client-a", max_per_minute=60, now=0.0)
        assert allowed is True
        assert retry == 0.0

    def test_denies_after_exhaustion(self):
        bucket: dict = {}
        for _ in range(60):
            check_rate_limit(bucket, "client-a", max_per_minute=60, now=0.0)

        allowed, retry = check_rate_limit(bucket, "client-a", max_per_minute=60, now=0.0)
        assert allowed is False
        assert retry > 0

    def test_refills_over_time(self):
        bucket: dict = {}
        for _ in range(60):
            check_rate_limit(bucket, "client-a", max_per_minute=60, now=0.0)

        # One token per second at 60/min
        allowed, _ = check_rate_limit(bucket, "client-a", max_per_minute=60, now=2.0)
        assert allowed is True

    def test_separate_keys_independent(self):
        bucket: dict = {}
        for _ in range(60):
            check_rate_limit(bucket, "client-a", max_per_minute=60, now=0.0)

        allowed, _ = check_rate_limit(bucket, "client-b", max_per_minute=60, now=0.0)
        assert allowed is True

    def test_zero_limit_always_allows(self):
        bucket: dict = {}
        allowed, _ = check_rate_limit(bucket, "any", max_per_minute=0, now=0.0)
        assert allowed is True
        assert bucket == {}


class TestRateLimitMiddleware:

    def test_exhausted_bucket_returns_429(self, client, monkeypatch):
        monkeypatch.setattr(settings, "rate_limit_per_minute", 2)
        headers = auth_headers("u1")
        assert client.get("/api/documents", headers=headers).status_code == 200
        assert client.get("/api/documents", headers=headers).status_code == 200

        resp = client.get("/api/documents", headers=headers)
        assert resp.status_code == 429
        assert "retry-after" in resp.headers
        error = resp.json()["error"]
        assert error["code"] == "RATE_LIMIT_EXCEEDED"
        assert error["details"]["retry_after"] > 0

    def test_principals_have_separate_buckets(self, client, monkeypatch):
        monkeypatch.setattr(settings, "rate_limit_per_minute", 1)
        assert client.get("/api/documents", headers=auth_headers("u1")).status_code == 200
        assert client.get("/api/documents", headers=auth_headers("u1")).status_code == 429
        assert client.get("/api/documents", headers=auth_headers("u2")).status_code == 200

    def test_health_is_exempt(self, client, monkeypatch):
        monkeypatch.setattr(settings, "rate_limit_per_minute", 1)
        for _ in range(3):
            assert client.get("/health").status_code == 200

    def test_session_grants_are_never_throttled(self, client, collaboration, monkeypatch):
        doc = make_document(client, owner="u1")
        monkeypatch.setattr(settings, "rate_limit_per_minute", 1)
        headers = auth_headers("u1")

        statuses = [
            client.post("/auth-session", json={"room": doc["id"]}, headers=headers).status_code
            for _ in range(3)
        ]
        assert statuses == [200, 200, 200]
        assert len(collaboration.calls) == 3
