"""Pure functions for creating and decoding identity tokens.

No classes, no state — just encode/decode. The identity provider mints
HS256 JWTs carrying the principal's claims; the auth dependency decodes them
here and hands the raw claims to ``normalize_claims``. ``create_token`` is
used by tests and local tooling to mint equivalent tokens.
"""

import hashlib
import hmac
import base64
import json
import time
from typing import Any, Optional


def create_token(
    subject: str,
    secret: str,
    algorithm: str = "HS256",
    expires_hours: float = 24,
    **claims: Any,
) -> str:
    """Create a signed JWT carrying identity claims.

    Args:
        subject: Principal id (``sub`` claim).
        secret: HMAC signing key.
        algorithm: Only HS256 supported.
        expires_hours: Hours until expiry.
        **claims: Additional claims, e.g. ``o={"id": "org_1"}``, ``org_id``,
            ``name``, ``email``, ``picture``. ``None`` values are omitted.

    Returns:
        Encoded JWT string.
    """
    if algorithm != "HS256":
        raise ValueError(f"Unsupported algorithm: {algorithm}")

    now = time.time()
    payload = {k: v for k, v in claims.items() if v is not None}
    payload.update({
        "sub": subject,
        "iat": int(now),
        "exp": int(now + expires_hours * 3600),
    })

    header = {"alg": "HS256", "typ": "JWT"}
    segments = [
        _b64encode(json.dumps(header).encode()),
        _b64encode(json.dumps(payload).encode()),
    ]
    signing_input = b".".join(segments)
    signature = hmac.new(secret.encode(), signing_input, hashlib.sha256).digest()
    segments.append(_b64encode(signature))
    return b".".join(segments).decode()


def decode_token(token: str, secret: str, algorithm: str = "HS256") -> Optional[dict]:
    """Decode and validate a JWT, returning its raw claims.

    Returns ``None`` on any validation failure (bad signature, expired, malformed)
    rather than raising — callers decide what to do with absence.
    """
    if algorithm != "HS256":
        return None

    try:
        parts = token.encode().split(b".")
        if len(parts) != 3:
            return None

        signing_input = parts[0] + b"." + parts[1]
        expected_sig = hmac.new(secret.encode(), signing_input, hashlib.sha256).digest()
        actual_sig = _b64decode(parts[2])

        if not hmac.compare_digest(expected_sig, actual_sig):
            return None

        payload = json.loads(_b64decode(parts[1]))
        if not isinstance(payload, dict):
            return None

        exp = payload.get("exp", 0)
        if time.time() > exp:
            return None

        return payload
    except (json.JSONDecodeError, KeyError, ValueError, IndexError, TypeError):
        return None


# --- base64url helpers (no padding, URL-safe) ---

def _b64encode(data: bytes) -> bytes:
    return base64.urlsafe_b64encode(data).rstrip(b"=")


def _b64decode(data: bytes) -> bytes:
    padding = 4 - len(data) % 4
    if padding != 4:
        data += b"=" * padding
    return base64.urlsafe_b64decode(data)
