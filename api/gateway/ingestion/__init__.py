"""Provider client registry for upstream catalogs."""

from __future__ import annotations

from typing import Dict

from gateway.ingestion.base import BaseProviderClient
from gateway.ingestion.google_books import GoogleBooksClient
from gateway.ingestion.spotify import SpotifyClient
from gateway.ingestion.tmdb import TMDBClient
from gateway.models.media import Provider

_CLIENTS: Dict[Provider, BaseProviderClient] = {}


def get_client(provider: Provider | str) -> BaseProviderClient:
    """Return the process-wide client instance for a provider."""
    try:
        key = Provider(provider)
    except ValueError:
        raise ValueError(f"Unsupported provider {provider}") from None
    if key not in _CLIENTS:
        if key is Provider.TMDB:
            _CLIENTS[key] = TMDBClient()
        elif key is Provider.SPOTIFY:
            _CLIENTS[key] = SpotifyClient()
        elif key is Provider.GOOGLE_BOOKS:
            _CLIENTS[key] = GoogleBooksClient()
    return _CLIENTS[key]


def default_clients() -> dict[Provider, BaseProviderClient]:
    return {provider: get_client(provider) for provider in Provider}
