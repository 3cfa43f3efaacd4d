"""Base provider client primitives for upstream catalogs."""

from __future__ import annotations

from typing import Any, ClassVar

from gateway.models.media import PROVIDER_KINDS, MediaKind, Provider


class BaseProviderClient:
    """Abstract client interface for an upstream catalog.

    Clients return the upstream's native payloads untouched; reshaping into the
    canonical schema happens in ``gateway.ingestion.normalizers``.
    """
    provider: ClassVar[Provider]
    search_limit: ClassVar[int] = 3

    @property
    def kinds(self) -> tuple[MediaKind, ...]:
        return PROVIDER_KINDS[self.provider]

    def supports(self, kind: MediaKind) -> bool:
        return kind in self.kinds

    async def search_by_title(
        self, title: str, kind: MediaKind, year: str | None = None
    ) -> list[dict[str, Any]]:
        """Return native search hits for a title, capped at ``search_limit``."""
        raise NotImplementedError

    async def fetch_by_id(self, native_id: str, kind: MediaKind) -> dict[str, Any]:
        """Return the native detail record for an upstream identifier."""
        raise NotImplementedError
