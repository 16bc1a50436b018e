"""Remote build-function client.

Every workflow action is one POST to a named function under
``<project origin>/functions/v1``. The client reports failures as results
instead of raising so callers can surface the raw body text verbatim.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from rankrent.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EdgeFunctionResult:
    """Outcome of one remote function call."""

    ok: bool
    status: int
    body_text: str
    json: Any = None


class EdgeFunctionClient:
    """Client for the backend's authenticated remote functions."""

    def __init__(
        self,
        base_url: str | None = None,
        anon_key: str | None = None,
        access_token: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.base_url = (base_url or settings.functions_base_url or "").rstrip("/")
        self.anon_key = anon_key or settings.supabase_anon_key
        self.access_token = access_token or settings.session_access_token
        self.timeout = timeout or settings.edge_function_timeout_seconds
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "EdgeFunctionClient":
        self._client = httpx.AsyncClient(timeout=self.timeout)
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("Client must be used as async context manager")
        return self._client

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "apikey": str(self.anon_key),
            "Content-Type": "application/json",
        }
        if extra:
            headers.update(extra)
        return headers

    async def call(
        self,
        function_name: str,
        body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> EdgeFunctionResult:
        """POST ``body`` as JSON to one remote function."""
        if not self.access_token:
            return EdgeFunctionResult(
                ok=False,
                status=401,
                body_text="No active session. Please sign in.",
            )
        if not self.anon_key:
            return EdgeFunctionResult(ok=False, status=500, body_text="Missing SUPABASE_ANON_KEY.")
        if not self.base_url:
            return EdgeFunctionResult(ok=False, status=500, body_text="Missing SUPABASE_URL.")

        url = f"{self.base_url}/{function_name}"
        logger.info("Remote function request", extra={"function": function_name})

        try:
            response = await self.client.post(
                url,
                json=body if body is not None else {},
                headers=self._headers(headers),
            )
        except httpx.TimeoutException:
            logger.warning(
                "Remote function timed out",
                extra={"function": function_name, "timeout": self.timeout},
            )
            return EdgeFunctionResult(
                ok=False,
                status=0,
                body_text=f"Request timed out after {self.timeout:g}s.",
            )
        except httpx.HTTPError as e:
            logger.warning(
                "Remote function HTTP error",
                extra={"function": function_name, "error": str(e)},
            )
            return EdgeFunctionResult(ok=False, status=0, body_text=str(e))

        body_text = response.text
        parsed: Any = None
        if body_text:
            try:
                parsed = json.loads(body_text)
            except ValueError:
                parsed = None

        ok = 200 <= response.status_code < 300
        if not ok:
            logger.warning(
                "Remote function error",
                extra={"function": function_name, "status": response.status_code},
            )

        return EdgeFunctionResult(
            ok=ok,
            status=response.status_code,
            body_text=body_text or response.reason_phrase,
            json=parsed,
        )
