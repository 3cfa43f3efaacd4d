from __future__ import annotations

from typing import Any

from gateway.core.config import settings
from gateway.ingestion.base import BaseProviderClient
from gateway.ingestion.http import AuthenticationFailed, fetch_json
from gateway.models.media import MediaKind, Provider

API_BASE = "https://api.themoviedb.org/3"

_ENDPOINTS = {MediaKind.MOVIE: "movie", MediaKind.SHOW: "tv"}
_DETAIL_APPENDS = {
    MediaKind.MOVIE: "credits,releases,external_ids,similar",
    MediaKind.SHOW: "credits,content_ratings,external_ids,similar",
}
_YEAR_PARAMS = {MediaKind.MOVIE: "year", MediaKind.SHOW: "first_air_date_year"}


class TMDBClient(BaseProviderClient):
    provider = Provider.TMDB
    search_limit = 5

    def __init__(
        self,
        api_key: str | None = None,
        auth_token: str | None = None,
        language: str | None = None,
    ) -> None:
        self.api_key = api_key or settings.tmdb_api_key
        self.auth_token = auth_token or settings.tmdb_api_auth_header
        self.language = language or settings.tmdb_language

    def _auth(self) -> tuple[dict[str, str], dict[str, str]]:
        headers: dict[str, str] = {"accept": "application/json"}
        params: dict[str, str] = {}
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        elif self.api_key:
            params["api_key"] = self.api_key
        else:
            raise AuthenticationFailed("TMDB API credentials missing; set TMDB_API_AUTH_HEADER or TMDB_API_KEY")
        return headers, params

    def _endpoint(self, kind: MediaKind) -> str:
        try:
            return _ENDPOINTS[kind]
        except KeyError:
            raise ValueError(f"TMDB does not serve {kind.value} items") from None

    async def search_by_title(
        self, title: str, kind: MediaKind, year: str | None = None
    ) -> list[dict[str, Any]]:
        endpoint = self._endpoint(kind)
        headers, params = self._auth()
        query: dict[str, Any] = {
            **params,
            "query": title,
            "page": 1,
            "include_adult": "false",
            "language": self.language,
        }
        if year:
            query[_YEAR_PARAMS[kind]] = year
        payload = await fetch_json(f"{API_BASE}/search/{endpoint}", headers=headers, params=query)
        results = payload.get("results") or []
        return [result for result in results if result.get("id") is not None][: self.search_limit]

    async def fetch_by_id(self, native_id: str, kind: MediaKind) -> dict[str, Any]:
        endpoint = self._endpoint(kind)
        headers, params = self._auth()
        return await fetch_json(
            f"{API_BASE}/{endpoint}/{native_id}",
            headers=headers,
            params={**params, "language": self.language, "append_to_response": _DETAIL_APPENDS[kind]},
        )
