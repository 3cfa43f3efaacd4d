"""Request dispatch across provider clients.

Implementation notes:
- Search fans out to every provider serving the requested kind; a provider that
  fails contributes zero results instead of failing the request, and a hit that
  cannot be mapped is skipped on its own.
- Detail decodes the identifier once and routes to exactly one client; decode,
  upstream or mapping failures produce an empty envelope.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Mapping

from gateway.core.config import settings
from gateway.ingestion import default_clients
from gateway.ingestion.base import BaseProviderClient
from gateway.ingestion.http import ExternalAPIError
from gateway.ingestion.identifiers import AgentIdentifier, UnrecognizedIdentifier, decode
from gateway.ingestion.normalizers import NORMALIZERS, normalize, summarize
from gateway.ingestion.observability import UpstreamMonitor, upstream_monitor
from gateway.models.media import PROVIDER_KINDS, MediaKind, Provider
from gateway.schema.agent import MediaContainer, MetadataItem, SearchResultItem
from gateway.utils.redaction import redact_secrets

logger = logging.getLogger("gateway.services.dispatcher")

# Raised by the mappings when an upstream payload has an unexpected shape;
# pydantic ValidationError is a ValueError.
MAPPING_ERRORS = (AttributeError, KeyError, TypeError, ValueError)


class MissingParameter(ValueError):
    """Raised when a required query parameter is absent or blank."""

    def __init__(self, *names: str) -> None:
        self.names = names
        super().__init__(f"Missing required parameter: {' or '.join(names)}")


SEARCH_KINDS: dict[str, MediaKind] = {
    "1": MediaKind.MOVIE,
    "movie": MediaKind.MOVIE,
    "2": MediaKind.SHOW,
    "show": MediaKind.SHOW,
    "tv": MediaKind.SHOW,
    "8": MediaKind.ALBUM,
    "artist": MediaKind.ALBUM,
    "9": MediaKind.ALBUM,
    "album": MediaKind.ALBUM,
    "book": MediaKind.ALBUM,
}

# Providers in result order for each requested kind.
SEARCH_ROUTES: dict[MediaKind, tuple[tuple[Provider, MediaKind], ...]] = {
    MediaKind.MOVIE: ((Provider.TMDB, MediaKind.MOVIE),),
    MediaKind.SHOW: ((Provider.TMDB, MediaKind.SHOW),),
    MediaKind.ALBUM: ((Provider.SPOTIFY, MediaKind.ALBUM), (Provider.GOOGLE_BOOKS, MediaKind.BOOK)),
}


def parse_kind(value: str | None) -> MediaKind | None:
    """Map numeric or named host type parameters onto a search kind."""
    if value is None:
        return None
    return SEARCH_KINDS.get(value.strip().lower())


def parse_year(value: str | None) -> str | None:
    """Keep a year filter only when it is a four-digit string."""
    if value is None:
        return None
    candidate = value.strip()
    return candidate if len(candidate) == 4 and candidate.isdigit() else None


def first_present(*values: str | None) -> str | None:
    """Return the first parameter value that is not blank."""
    for value in values:
        if value is not None and value.strip():
            return value.strip()
    return None


class Dispatcher:
    """Route search and detail requests to provider clients."""

    def __init__(
        self,
        clients: Mapping[Provider, BaseProviderClient] | None = None,
        monitor: UpstreamMonitor | None = None,
    ) -> None:
        self.clients = dict(clients) if clients is not None else default_clients()
        self.monitor = monitor or upstream_monitor
        missing = [provider.value for provider in Provider if provider not in self.clients]
        if missing:
            raise ValueError(f"No client registered for providers: {', '.join(missing)}")
        unsupported = [
            f"{provider.value}/{kind.value}"
            for routes in SEARCH_ROUTES.values()
            for provider, kind in routes
            if not self.clients[provider].supports(kind)
        ]
        if unsupported:
            raise ValueError(f"Clients do not serve searched kinds: {', '.join(unsupported)}")
        unmapped = [
            f"{provider.value}/{kind.value}"
            for provider, kinds in PROVIDER_KINDS.items()
            for kind in kinds
            if (provider, kind) not in NORMALIZERS
        ]
        if unmapped:
            raise ValueError(f"No normalizer registered for: {', '.join(unmapped)}")

    def _envelope(self, items: list[SearchResultItem] | list[MetadataItem]) -> MediaContainer:
        return MediaContainer(identifier=settings.provider_identifier, metadata=items)

    async def search(self, query: str | None, kind_param: str | None, year: str | None = None) -> MediaContainer:
        """Search every provider serving the requested kind."""
        title = first_present(query)
        if title is None:
            raise MissingParameter("query", "title")
        kind = parse_kind(kind_param)
        if kind is None:
            logger.info("Unrecognized search type %r; returning no matches", kind_param)
            return self._envelope([])
        routes = SEARCH_ROUTES[kind]
        batches = await asyncio.gather(
            *(
                self._search_provider(provider, provider_kind, title, parse_year(year))
                for provider, provider_kind in routes
            )
        )
        results: list[SearchResultItem] = [item for batch in batches for item in batch]
        return self._envelope(results)

    async def _search_provider(
        self, provider: Provider, kind: MediaKind, title: str, year: str | None
    ) -> list[SearchResultItem]:
        client = self.clients[provider]
        try:
            hits = await self.monitor.track(
                provider.value,
                "search",
                lambda: client.search_by_title(title, kind, year),
                context={"kind": kind.value, "query": title},
            )
        except ExternalAPIError:
            return []
        results: list[SearchResultItem] = []
        for hit in hits:
            try:
                results.extend(summarize(provider, kind, [hit]))
            except MAPPING_ERRORS as exc:
                logger.warning(
                    "Skipping malformed %s %s hit: %s", provider.value, kind.value, redact_secrets(str(exc))
                )
        return results

    async def detail(self, raw_identifier: str | None) -> MediaContainer:
        """Fetch and normalize one item named by an opaque identifier."""
        token = first_present(raw_identifier)
        if token is None:
            raise MissingParameter("id", "ratingKey", "guid")
        try:
            identifier = decode(token)
        except UnrecognizedIdentifier as exc:
            logger.info("%s; returning empty envelope", exc)
            return self._envelope([])
        item = await self._fetch(identifier)
        return self._envelope([item] if item is not None else [])

    async def _fetch(self, identifier: AgentIdentifier) -> MetadataItem | None:
        client = self.clients[identifier.provider]
        try:
            payload = await self.monitor.track(
                identifier.provider.value,
                "fetch",
                lambda: client.fetch_by_id(identifier.native_id, identifier.kind),
                context={"identifier": identifier.token},
            )
        except ExternalAPIError:
            return None
        try:
            return normalize(identifier, payload)
        except MAPPING_ERRORS as exc:
            logger.warning("Unable to map %s: %s", identifier.token, redact_secrets(str(exc)))
            return None


_dispatcher: Dispatcher | None = None


def get_dispatcher() -> Dispatcher:
    """Return the process-wide dispatcher used by the HTTP routes."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = Dispatcher()
    return _dispatcher
