"""Spotify catalog client for album search and detail lookups."""

from __future__ import annotations

from typing import Any

from gateway.core.config import settings
from gateway.ingestion.base import BaseProviderClient
from gateway.ingestion.http import AuthenticationFailed, UpstreamUnavailable, fetch_json
from gateway.ingestion.tokens import TokenCache
from gateway.models.media import MediaKind, Provider

SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"
SPOTIFY_API_BASE = "https://api.spotify.com/v1"


class SpotifyClient(BaseProviderClient):
    """Spotify Web API client authenticated with client credentials."""
    provider = Provider.SPOTIFY
    search_limit = 3

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        *,
        token_cache: TokenCache | None = None,
    ) -> None:
        self.token_cache = token_cache or TokenCache(
            SPOTIFY_TOKEN_URL,
            client_id or settings.spotify_client_id,
            client_secret or settings.spotify_client_secret,
        )

    async def _headers(self) -> dict[str, str]:
        """Build bearer headers, failing when no token can be obtained."""
        token = await self.token_cache.get()
        if not token:
            raise AuthenticationFailed("Spotify token unavailable")
        return {"Authorization": f"Bearer {token}"}

    async def _get(self, url: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """GET with the bearer token, dropping it when the upstream rejects it."""
        headers = await self._headers()
        try:
            return await fetch_json(url, headers=headers, params=params)
        except UpstreamUnavailable as exc:
            if exc.status_code == 401:
                self.token_cache.invalidate()
            raise

    async def search_by_title(
        self, title: str, kind: MediaKind, year: str | None = None
    ) -> list[dict[str, Any]]:
        query = f"{title} year:{year}" if year else title
        payload = await self._get(
            f"{SPOTIFY_API_BASE}/search",
            params={"q": query, "type": "album", "limit": self.search_limit},
        )
        items = (payload.get("albums") or {}).get("items") or []
        return [item for item in items if item and item.get("id")][: self.search_limit]

    async def fetch_by_id(self, native_id: str, kind: MediaKind) -> dict[str, Any]:
        return await self._get(f"{SPOTIFY_API_BASE}/albums/{native_id}")
