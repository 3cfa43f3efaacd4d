"""Identifier codec round-trips, URI unwrapping and prefix routing."""

from __future__ import annotations

import pytest

from gateway.core.config import settings
from gateway.ingestion.identifiers import (
    AgentIdentifier,
    UnrecognizedIdentifier,
    build_guid,
    build_key,
    decode,
    encode,
    identify_provider,
)
from gateway.models.media import MediaKind, Provider

SUPPORTED = [
    (Provider.TMDB, MediaKind.MOVIE, "603"),
    (Provider.TMDB, MediaKind.SHOW, "1399"),
    (Provider.SPOTIFY, MediaKind.ALBUM, "4aawyAB9vmqN3uQ7FjRGTy"),
    (Provider.GOOGLE_BOOKS, MediaKind.BOOK, "zyTCAlFPjgYC"),
    (Provider.GOOGLE_BOOKS, MediaKind.BOOK, "Q1k-AAAAYAAJ"),
    (Provider.GOOGLE_BOOKS, MediaKind.BOOK, "tmdb-movie-1"),
]


@pytest.mark.parametrize(("provider", "kind", "native_id"), SUPPORTED)
def test_decode_reverses_encode(provider: Provider, kind: MediaKind, native_id: str) -> None:
    token = encode(provider, kind, native_id)
    assert decode(token) == AgentIdentifier(provider, kind, native_id)


def test_tokens_use_documented_prefixes() -> None:
    assert encode(Provider.TMDB, MediaKind.MOVIE, "603") == "tmdb-movie-603"
    assert encode(Provider.TMDB, MediaKind.SHOW, "1399") == "tmdb-show-1399"
    assert encode(Provider.SPOTIFY, MediaKind.ALBUM, "abc") == "spotify-album-abc"
    assert encode(Provider.GOOGLE_BOOKS, MediaKind.BOOK, "xyz") == "google-book-xyz"


def test_distinct_inputs_never_share_a_token() -> None:
    tokens = {encode(provider, kind, native_id) for provider, kind, native_id in SUPPORTED}
    tokens.add(encode(Provider.TMDB, MediaKind.SHOW, "603"))
    assert len(tokens) == len(SUPPORTED) + 1


@pytest.mark.parametrize(
    "wrap",
    [
        lambda token: f"{settings.provider_identifier}://movie/{token}",
        lambda token: f"/library/metadata/{token}",
        lambda token: f"https://gateway.example.com/library/metadata/{token}?X-Plex-Token=abc",
        lambda token: f"plex://album/{token}#details",
        lambda token: f"  {token}  ",
        lambda token: f"{token}/",
    ],
)
@pytest.mark.parametrize(("provider", "kind", "native_id"), SUPPORTED[:4])
def test_decode_ignores_uri_wrapping(wrap, provider: Provider, kind: MediaKind, native_id: str) -> None:
    token = encode(provider, kind, native_id)
    assert decode(wrap(token)) == decode(token)


def test_decode_percent_decodes_trailing_segment() -> None:
    assert decode("/library/metadata/google-book-Q1k%2DAAAAYAAJ").native_id == "Q1k-AAAAYAAJ"


@pytest.mark.parametrize(
    "token",
    [
        "xyz-unknown-1",
        "tmdb-movie-",
        "tmdb-603",
        "spotify-track-abc",
        "imdb://tt0133093",
        "",
        "   ",
        "/",
        "tmdb-movie-603%25",
        "tmdb-movie-603%2520x",
        "/library/metadata/tmdb-movie-60%203",
        "google-book-abc%3Fkey%3Dx",
    ],
)
def test_decode_rejects_unknown_tokens(token: str) -> None:
    with pytest.raises(UnrecognizedIdentifier):
        decode(token)


def test_identify_provider_uses_prefix() -> None:
    assert identify_provider("tmdb-show-1399") is Provider.TMDB
    assert identify_provider("spotify-album-abc") is Provider.SPOTIFY
    assert identify_provider(f"{settings.provider_identifier}://album/google-book-xyz") is Provider.GOOGLE_BOOKS


def test_encode_rejects_unsupported_pairs_and_reserved_characters() -> None:
    with pytest.raises(ValueError):
        encode(Provider.SPOTIFY, MediaKind.MOVIE, "abc")
    with pytest.raises(ValueError):
        encode(Provider.TMDB, MediaKind.MOVIE, "")
    with pytest.raises(ValueError):
        encode(Provider.TMDB, MediaKind.MOVIE, "60/3")
    with pytest.raises(ValueError):
        encode(Provider.TMDB, MediaKind.MOVIE, "603 ")


def test_guid_and_key_embed_host_type() -> None:
    book = AgentIdentifier(Provider.GOOGLE_BOOKS, MediaKind.BOOK, "zyTCAlFPjgYC")
    assert build_guid(book) == f"{settings.provider_identifier}://album/google-book-zyTCAlFPjgYC"
    assert build_key(book) == "/library/metadata/google-book-zyTCAlFPjgYC"
    assert decode(build_guid(book)) == book


@pytest.mark.parametrize("token", ["tmdb-movie-603%25", "spotify-album-a%20b", "google-book-x%2Fy"])
def test_decoded_identifiers_always_re_encode(token: str) -> None:
    with pytest.raises(UnrecognizedIdentifier):
        decode(token)
    identifier = decode("google-book-Q1k%2DAAAAYAAJ")
    assert decode(identifier.token) == identifier
