"""HTTP client for the hosted real-time collaboration service."""

import logging
from typing import Any, Optional

import httpx

from ..core.config import settings
from ..exceptions import CollaborationServiceError

logger = logging.getLogger(__name__)

AUTHORIZE_PATH = "/v2/authorize-user"


class CollaborationClient:
    """Sync client that asks the collaboration service to mint a session token.

    Configuration comes from settings:
        collaboration_api_url          service base URL
        collaboration_secret_key       server-side secret sent as Bearer
        collaboration_timeout_seconds  request timeout

    One request per authorization, no retries. Transport failures and 5xx
    responses raise CollaborationServiceError; anything else is returned
    to the caller unchanged.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        secret_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.collaboration_api_url).rstrip("/")
        self.secret_key = settings.collaboration_secret_key if secret_key is None else secret_key
        self.timeout = timeout or settings.collaboration_timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    def _get_client(self) -> httpx.Client:
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                base_url=self.base_url,
                headers={"Authorization": f"Bearer {self.secret_key}"},
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    def authorize_user(
        self,
        user_id: str,
        room: str,
        permissions: list[str],
        user_info: dict[str, Any],
    ) -> tuple[int, str]:
        """Request a session for *user_id* scoped to *room*. Returns ``(status, body)``."""
        if not self.secret_key:
            raise CollaborationServiceError("Collaboration service is not configured")

        payload = {
            "userId": user_id,
            "userInfo": user_info,
            "permissions": {room: permissions},
        }
        try:
            resp = self._get_client().post(AUTHORIZE_PATH, json=payload)
        except httpx.HTTPError as exc:
            logger.error(
                "Collaboration service request failed",
                extra={"room": room, "error": str(exc)},
            )
            raise CollaborationServiceError("Collaboration service request failed", original_error=exc)

        if resp.status_code >= 500:
            logger.error(
                "Collaboration service returned an error",
                extra={"room": room, "status_code": resp.status_code},
            )
            raise CollaborationServiceError(f"Collaboration service returned {resp.status_code}")

        return resp.status_code, resp.text

    def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            self._client.close()
