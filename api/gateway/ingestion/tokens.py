"""Client-credentials bearer token cache for token-authenticated upstreams."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

import httpx

from gateway.core.config import settings
from gateway.utils.datetime import utcnow
from gateway.utils.redaction import redact_secrets

logger = logging.getLogger("gateway.ingestion.tokens")


@dataclass(frozen=True, slots=True)
class CachedToken:
    access_token: str
    expires_at: datetime


class TokenCache:
    """Cache one bearer token per client and refresh it near expiry.

    The cached value is an immutable pair replaced in a single assignment, so
    two requests refreshing at once leave one of two valid tokens behind.
    """

    def __init__(
        self,
        token_url: str,
        client_id: str | None,
        client_secret: str | None,
        *,
        refresh_margin: timedelta | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.token_url = token_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.refresh_margin = (
            refresh_margin
            if refresh_margin is not None
            else timedelta(seconds=settings.token_refresh_margin_seconds)
        )
        self._clock = clock
        self._cached: CachedToken | None = None

    @property
    def cached(self) -> CachedToken | None:
        return self._cached

    def invalidate(self) -> None:
        """Drop the cached token so the next ``get`` refreshes."""
        self._cached = None

    def is_fresh(self) -> bool:
        """Return True while the cached token is outside the refresh margin."""
        cached = self._cached
        if cached is None:
            return False
        return self._clock() < cached.expires_at - self.refresh_margin

    async def get(self) -> str | None:
        """Return a usable bearer token, refreshing when missing or expiring."""
        cached = self._cached
        if cached is not None and self.is_fresh():
            return cached.access_token
        return await self.refresh()

    async def refresh(self) -> str | None:
        """Run the client-credentials exchange; ``None`` on any failure."""
        if not self.client_id or not self.client_secret:
            logger.warning("Client credentials missing for %s; skipping token refresh", self.token_url)
            return None
        auth = base64.b64encode(f"{self.client_id}:{self.client_secret}".encode("utf-8")).decode("utf-8")
        headers = {
            "Authorization": f"Basic {auth}",
            "Content-Type": "application/x-www-form-urlencoded",
        }
        try:
            async with httpx.AsyncClient(timeout=settings.upstream_timeout_seconds) as client:
                response = await client.post(
                    self.token_url,
                    data={"grant_type": "client_credentials"},
                    headers=headers,
                )
            if response.status_code >= 400:
                logger.warning("Token endpoint %s answered %s", self.token_url, response.status_code)
                return None
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Token refresh against %s failed: %s", self.token_url, redact_secrets(str(exc)))
            return None
        if not isinstance(data, dict):
            logger.warning("Token endpoint %s returned a malformed body", self.token_url)
            return None
        token = data.get("access_token")
        try:
            expires_seconds = int(data.get("expires_in"))
        except (TypeError, ValueError):
            expires_seconds = 0
        if not token or expires_seconds <= 0:
            logger.warning("Token endpoint %s returned no usable token", self.token_url)
            return None
        self._cached = CachedToken(
            access_token=token,
            expires_at=self._clock() + timedelta(seconds=expires_seconds),
        )
        return token
