"""Dispatcher wiring and request parameter parsing."""

from __future__ import annotations

import pytest

from gateway.ingestion.identifiers import UnrecognizedIdentifier
from gateway.models.media import MediaKind, Provider
from gateway.services.dispatcher import (
    SEARCH_ROUTES,
    Dispatcher,
    MissingParameter,
    first_present,
    parse_kind,
    parse_year,
)
from gateway.tests.utils import StubClient


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("1", MediaKind.MOVIE),
        ("Movie", MediaKind.MOVIE),
        ("2", MediaKind.SHOW),
        ("tv", MediaKind.SHOW),
        (" show ", MediaKind.SHOW),
        ("8", MediaKind.ALBUM),
        ("artist", MediaKind.ALBUM),
        ("9", MediaKind.ALBUM),
        ("book", MediaKind.ALBUM),
        ("4", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_kind(value, expected) -> None:
    assert parse_kind(value) == expected


def test_album_searches_fan_out_to_music_then_books() -> None:
    assert SEARCH_ROUTES[MediaKind.ALBUM] == (
        (Provider.SPOTIFY, MediaKind.ALBUM),
        (Provider.GOOGLE_BOOKS, MediaKind.BOOK),
    )


@pytest.mark.parametrize(("value", "expected"), [("1999", "1999"), (" 2011 ", "2011"), ("99", None), ("abcd", None)])
def test_parse_year_keeps_four_digit_years(value, expected) -> None:
    assert parse_year(value) == expected


def test_first_present_skips_blank_values() -> None:
    assert first_present(None, "  ", " tmdb-movie-603 ") == "tmdb-movie-603"
    assert first_present(None, "") is None


def test_dispatcher_requires_a_client_per_provider() -> None:
    clients = {Provider.TMDB: StubClient(Provider.TMDB)}
    with pytest.raises(ValueError, match="spotify, google_books"):
        Dispatcher(clients=clients)


@pytest.mark.asyncio
async def test_search_rejects_blank_title(dispatcher: Dispatcher) -> None:
    with pytest.raises(MissingParameter) as excinfo:
        await dispatcher.search("   ", "movie")
    assert excinfo.value.names == ("query", "title")


@pytest.mark.asyncio
async def test_detail_rejects_missing_identifier(dispatcher: Dispatcher) -> None:
    with pytest.raises(MissingParameter):
        await dispatcher.detail(None)


@pytest.mark.asyncio
async def test_detail_of_unknown_prefix_is_empty(dispatcher: Dispatcher) -> None:
    container = await dispatcher.detail("imdb-movie-tt0133093")
    assert container.size == 0
    assert issubclass(UnrecognizedIdentifier, ValueError)


def test_dispatcher_rejects_client_wired_to_the_wrong_provider() -> None:
    clients = {provider: StubClient(provider) for provider in Provider}
    clients[Provider.SPOTIFY] = StubClient(Provider.TMDB)
    with pytest.raises(ValueError, match="spotify/album"):
        Dispatcher(clients=clients)


@pytest.mark.asyncio
async def test_malformed_hit_is_skipped_without_dropping_its_neighbours(dispatcher, stub_clients) -> None:
    stub_clients[Provider.SPOTIFY].hits = [
        {"id": "broken", "name": "Broken", "artists": [None]},
        {"id": "ok", "name": "Fine", "artists": [{"name": "Someone"}]},
    ]

    container = await dispatcher.search("Fine", "album")

    assert [item.rating_key for item in container.metadata] == ["spotify-album-ok"]
