"""Google Books client for volume search and detail lookups."""

from __future__ import annotations

from typing import Any

from gateway.core.config import settings
from gateway.ingestion.base import BaseProviderClient
from gateway.ingestion.http import fetch_json
from gateway.models.media import MediaKind, Provider

VOLUMES_URL = "https://www.googleapis.com/books/v1/volumes"


class GoogleBooksClient(BaseProviderClient):
    """Google Books API client for volume data."""
    provider = Provider.GOOGLE_BOOKS
    search_limit = 3

    def __init__(self, api_key: str | None = None) -> None:
        self.api_key = api_key or settings.google_books_api_key

    def _params(self, **extra: Any) -> dict[str, Any]:
        params = dict(extra)
        if self.api_key:
            params["key"] = self.api_key
        return params

    async def search_by_title(
        self, title: str, kind: MediaKind, year: str | None = None
    ) -> list[dict[str, Any]]:
        """Search volumes; the API has no year filter so ``year`` is ignored."""
        data = await fetch_json(VOLUMES_URL, params=self._params(q=title, maxResults=self.search_limit))
        items = data.get("items") or []
        return [item for item in items if item.get("id")][: self.search_limit]

    async def fetch_by_id(self, native_id: str, kind: MediaKind) -> dict[str, Any]:
        """Fetch a volume record by ID."""
        return await fetch_json(f"{VOLUMES_URL}/{native_id}", params=self._params() or None)
