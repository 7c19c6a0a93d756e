"""Request context middleware: request ids, request logging and rate limiting.

One pass per request:
- take ``X-Request-ID`` from the caller or mint one
- charge the caller's token bucket (session grants are never throttled)
- time the request and log it with the share token stripped from the path

Buckets are keyed by principal when the bearer token verifies, otherwise by
client address, so callers behind one NAT do not starve each other.
``check_rate_limit`` is a pure function and is tested on its own.
"""

import logging
import threading
import time
import uuid
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..core.auth import normalize_claims
from ..core.config import settings
from ..core.logging_config import redact, request_id_var
from ..core.token_factory import decode_token
from ..exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)

# Health checks, API docs and session grants are never throttled.
_EXEMPT_PATHS = frozenset({"/", "/health", "/docs", "/redoc", "/openapi.json", "/auth-session"})

# {bucket_key: (available_tokens, last_refill_timestamp)}
_rate_buckets: dict[str, tuple[float, float]] = {}
_rate_lock = threading.Lock()

_rate_call_count = 0
_EVICT_EVERY = 100
_EVICT_AGE = 120.0  # seconds


def check_rate_limit(
    bucket: dict[str, tuple[float, float]],
    key: str,
    max_per_minute: int,
    now: Optional[float] = None,
) -> tuple[bool, float]:
    """Charge one request to *key*'s token bucket.

    Args:
        bucket: Per-key state, modified in place.
        key: Bucket key, see ``bucket_key``.
        max_per_minute: Sustained rate cap. ``0`` or less disables the check.
        now: Monotonic timestamp, injectable for tests.

    Returns:
        ``(allowed, retry_after)``. *retry_after* is 0.0 when allowed, otherwise
        the seconds until the next token is available.
    """
    global _rate_call_count

    if max_per_minute <= 0:
        return True, 0.0

    if now is None:
        now = time.monotonic()

    _rate_call_count += 1
    if _rate_call_count % _EVICT_EVERY == 0:
        cutoff = now - _EVICT_AGE
        for stale in [k for k, (_, ts) in bucket.items() if ts < cutoff]:
            del bucket[stale]

    per_second = max_per_minute / 60.0
    if key in bucket:
        tokens, last_refill = bucket[key]
        tokens = min(float(max_per_minute), tokens + (now - last_refill) * per_second)
    else:
        tokens = float(max_per_minute)

    if tokens >= 1.0:
        bucket[key] = (tokens - 1.0, now)
        return True, 0.0

    bucket[key] = (tokens, now)
    return False, (1.0 - tokens) / per_second


def _client_address(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


def bucket_key(request: Request) -> str:
    """``principal:<id>`` for a verified bearer token, else ``addr:<client ip>``.

    The prefix keeps the two namespaces apart.
    """
    authorization = request.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        principal = normalize_claims(
            decode_token(credentials.strip(), settings.jwt_secret_key, settings.jwt_algorithm)
        )
        if principal is not None:
            return f"principal:{principal.principal_id}"

    return f"addr:{_client_address(request)}"


class RequestContextMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex[:16]
        request_id_var.set(rid)
        path = request.url.path
        logged_path = redact(path)

        if path not in _EXEMPT_PATHS:
            key = bucket_key(request)
            with _rate_lock:
                allowed, retry_after = check_rate_limit(_rate_buckets, key, settings.rate_limit_per_minute)
            if not allowed:
                logger.warning(
                    "Rate limit exceeded",
                    extra={"bucket": key, "path": logged_path, "retry_after": round(retry_after, 1)},
                )
                error = RateLimitExceededError(retry_after)
                return JSONResponse(
                    status_code=error.status_code,
                    content=error.to_dict(),
                    headers={"Retry-After": str(int(retry_after) + 1), "X-Request-ID": rid},
                )

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        response.headers["X-Request-ID"] = rid
        response.headers["X-Response-Time"] = f"{duration_ms}ms"

        logger.info(
            f"{request.method} {logged_path} {response.status_code}",
            extra={
                "method": request.method,
                "path": logged_path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response
