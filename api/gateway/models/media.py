"""Provider and media kind enumerations shared across the gateway."""

from __future__ import annotations

import enum


class Provider(str, enum.Enum):
    """Upstream catalogs the gateway aggregates."""
    TMDB = "tmdb"
    SPOTIFY = "spotify"
    GOOGLE_BOOKS = "google_books"


class MediaKind(str, enum.Enum):
    """Media categories carried in identifiers and records."""
    MOVIE = "movie"
    SHOW = "show"
    ALBUM = "album"
    BOOK = "book"

    @property
    def host_type(self) -> int:
        """Numeric type code understood by the host media manager."""
        return HOST_TYPE_CODES[self]

    @property
    def host_type_name(self) -> str:
        """Type name surfaced to the host; books masquerade as albums."""
        return HOST_TYPE_NAMES[self]


HOST_TYPE_CODES: dict[MediaKind, int] = {
    MediaKind.MOVIE: 1,
    MediaKind.SHOW: 2,
    MediaKind.ALBUM: 9,
    MediaKind.BOOK: 9,
}

HOST_TYPE_NAMES: dict[MediaKind, str] = {
    MediaKind.MOVIE: "movie",
    MediaKind.SHOW: "show",
    MediaKind.ALBUM: "album",
    MediaKind.BOOK: "album",
}

PROVIDER_KINDS: dict[Provider, tuple[MediaKind, ...]] = {
    Provider.TMDB: (MediaKind.MOVIE, MediaKind.SHOW),
    Provider.SPOTIFY: (MediaKind.ALBUM,),
    Provider.GOOGLE_BOOKS: (MediaKind.BOOK,),
}
