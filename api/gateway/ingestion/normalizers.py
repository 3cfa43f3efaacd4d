"""Per-provider mappings from native upstream payloads to canonical records.

Every mapping is a pure function keyed by ``(provider, kind)`` in ``NORMALIZERS``
(detail records) and ``SUMMARIZERS`` (search hits). Field names, unit
conversions and truncation caps here are what the host renders, so the sample
payload tests pin them down exactly.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable

from gateway.core.config import settings
from gateway.ingestion.identifiers import AgentIdentifier, build_guid, build_key
from gateway.models.media import MediaKind, Provider
from gateway.schema.agent import Contributor, ExternalGuid, MetadataItem, SearchResultItem, Tag, Track
from gateway.utils.datetime import year_from
from gateway.utils.text import secure_url, strip_markup

TMDB_IMAGE_BASE = "https://image.tmdb.org/t/p/original"
TMDB_THUMB_BASE = "https://image.tmdb.org/t/p/w200"

NOT_RATED = "NR"
UNKNOWN_TITLE = "Unknown"
UNKNOWN_AUTHOR = "Unknown Author"

CAST_LIMIT = 15
WRITER_LIMIT = 3
SIMILAR_LIMIT = 10
MS_PER_MINUTE = 60_000

_BOOK_IMAGE_PREFERENCE = ("extraLarge", "large", "medium", "small", "thumbnail", "smallThumbnail")

DetailMapper = Callable[[str, dict[str, Any]], MetadataItem]
SummaryMapper = Callable[[dict[str, Any]], SearchResultItem]


def _tmdb_image(path: str | None, base: str = TMDB_IMAGE_BASE) -> str | None:
    if not path:
        return None
    if path.startswith(("http://", "https://", "//")):
        return secure_url(path)
    return f"{base}{path}"


def _minutes_to_ms(minutes: Any) -> int | None:
    if minutes is None:
        return None
    try:
        return int(round(float(minutes) * MS_PER_MINUTE))
    except (TypeError, ValueError):
        return None


def _tags(values: Iterable[Any]) -> list[Tag]:
    return [Tag(tag=str(value)) for value in values if value]


def _guids(pairs: Iterable[tuple[str, Any]]) -> list[ExternalGuid]:
    """One ``scheme://value`` entry per non-empty cross reference."""
    guids: list[ExternalGuid] = []
    seen: set[str] = set()
    for scheme, value in pairs:
        if value is None or value == "":
            continue
        guid = f"{scheme}://{value}"
        if guid in seen:
            continue
        seen.add(guid)
        guids.append(ExternalGuid(id=guid))
    return guids


def _ordered(entries: Iterable[tuple[str, str, str | None]]) -> list[Contributor]:
    """Assign 1-based display order matching position in the final list."""
    return [
        Contributor(tag=name, role=role, thumb=thumb, order=index)
        for index, (name, role, thumb) in enumerate(entries, start=1)
    ]


def _unique_names(members: Iterable[dict[str, Any]], limit: int | None = None) -> list[dict[str, Any]]:
    picked: list[dict[str, Any]] = []
    seen: set[str] = set()
    for member in members:
        name = member.get("name")
        if not name or name in seen:
            continue
        seen.add(name)
        picked.append(member)
        if limit is not None and len(picked) >= limit:
            break
    return picked


def _region_entry(entries: Iterable[dict[str, Any]] | None) -> dict[str, Any] | None:
    return next(
        (entry for entry in entries or [] if entry.get("iso_3166_1") == settings.home_region),
        None,
    )


def _tmdb_content_rating(payload: dict[str, Any], kind: MediaKind) -> str:
    if kind == MediaKind.MOVIE:
        entry = _region_entry((payload.get("releases") or {}).get("countries"))
        rating = entry.get("certification") if entry else None
    else:
        entry = _region_entry((payload.get("content_ratings") or {}).get("results"))
        rating = entry.get("rating") if entry else None
    return rating or NOT_RATED


def _tmdb_contributors(payload: dict[str, Any], kind: MediaKind) -> list[Contributor]:
    credits = payload.get("credits") or {}
    crew = credits.get("crew") or []
    cast = sorted(credits.get("cast") or [], key=lambda member: member.get("order", 0))[:CAST_LIMIT]
    entries: list[tuple[str, str, str | None]] = [
        (
            member["name"],
            member.get("character") or "Actor",
            _tmdb_image(member.get("profile_path"), TMDB_THUMB_BASE),
        )
        for member in cast
        if member.get("name")
    ]
    directors = _unique_names(member for member in crew if member.get("job") == "Director")
    entries.extend(
        (member["name"], "Director", _tmdb_image(member.get("profile_path"), TMDB_THUMB_BASE))
        for member in directors
    )
    writer_pool = [member for member in crew if member.get("department") == "Writing"]
    if kind == MediaKind.SHOW:
        # series creators are credited ahead of episode writers
        writer_pool = list(payload.get("created_by") or []) + writer_pool
    writers = _unique_names(writer_pool, limit=WRITER_LIMIT)
    entries.extend(
        (member["name"], "Writer", _tmdb_image(member.get("profile_path"), TMDB_THUMB_BASE))
        for member in writers
    )
    return _ordered(entries)


def _tmdb_detail(kind: MediaKind) -> DetailMapper:
    def _map(native_id: str, payload: dict[str, Any]) -> MetadataItem:
        identifier = AgentIdentifier(Provider.TMDB, kind, native_id)
        if kind == MediaKind.MOVIE:
            title = payload.get("title")
            original_title = payload.get("original_title")
            released = payload.get("release_date")
            runtime = payload.get("runtime")
        else:
            title = payload.get("name")
            original_title = payload.get("original_name")
            released = payload.get("first_air_date")
            runtime = next(iter(payload.get("episode_run_time") or []), None)
        external = payload.get("external_ids") or {}
        companies = payload.get("production_companies") or payload.get("networks") or []
        similar = (payload.get("similar") or {}).get("results") or []
        return MetadataItem(
            rating_key=identifier.token,
            key=build_key(identifier),
            guid=build_guid(identifier),
            type=kind.host_type_name,
            title=title or UNKNOWN_TITLE,
            original_title=original_title or None,
            summary=strip_markup(payload.get("overview")) or None,
            year=year_from(released),
            originally_available_at=released or None,
            duration=_minutes_to_ms(runtime),
            content_rating=_tmdb_content_rating(payload, kind),
            thumb=_tmdb_image(payload.get("poster_path")),
            art=_tmdb_image(payload.get("backdrop_path")),
            studio=next((company.get("name") for company in companies if company.get("name")), None),
            audience_rating=payload.get("vote_average"),
            genres=_tags(genre.get("name") for genre in payload.get("genres") or []),
            contributors=_tmdb_contributors(payload, kind),
            guids=_guids(
                [
                    ("tmdb", payload.get("id") or native_id),
                    ("imdb", payload.get("imdb_id") or external.get("imdb_id")),
                    ("tvdb", external.get("tvdb_id")),
                    ("wikidata", external.get("wikidata_id")),
                ]
            ),
            similar=_tags(
                (entry.get("title") or entry.get("name")) for entry in similar[:SIMILAR_LIMIT]
            ),
        )

    return _map


def _tmdb_summary(kind: MediaKind) -> SummaryMapper:
    def _map(hit: dict[str, Any]) -> SearchResultItem:
        identifier = AgentIdentifier(Provider.TMDB, kind, str(hit["id"]))
        if kind == MediaKind.MOVIE:
            title, released = hit.get("title"), hit.get("release_date")
        else:
            title, released = hit.get("name"), hit.get("first_air_date")
        return SearchResultItem(
            rating_key=identifier.token,
            key=build_key(identifier),
            guid=build_guid(identifier),
            type=kind.host_type_name,
            title=title or UNKNOWN_TITLE,
            year=year_from(released),
            thumb=_tmdb_image(hit.get("poster_path"), TMDB_THUMB_BASE),
        )

    return _map


def _first_image(images: list[dict[str, Any]] | None) -> str | None:
    return secure_url(next((image.get("url") for image in images or [] if image.get("url")), None))


def map_spotify_album(native_id: str, payload: dict[str, Any]) -> MetadataItem:
    identifier = AgentIdentifier(Provider.SPOTIFY, MediaKind.ALBUM, native_id)
    artists = [artist for artist in payload.get("artists") or [] if artist.get("name")]
    artist_name = artists[0]["name"] if artists else None
    track_items = [item for item in (payload.get("tracks") or {}).get("items") or [] if item]
    tracks = [
        Track(index=index, title=item.get("name") or UNKNOWN_TITLE, duration=item.get("duration_ms"))
        for index, item in enumerate(track_items, start=1)
    ]
    durations = [track.duration for track in tracks if track.duration is not None]
    total_tracks = payload.get("total_tracks") or len(tracks)
    summary = f"Album by {artist_name} with {total_tracks} tracks." if artist_name else None
    external = payload.get("external_ids") or {}
    popularity = payload.get("popularity")
    released = payload.get("release_date")
    return MetadataItem(
        rating_key=identifier.token,
        key=build_key(identifier),
        guid=build_guid(identifier),
        type=MediaKind.ALBUM.host_type_name,
        title=payload.get("name") or UNKNOWN_TITLE,
        parent_title=artist_name,
        summary=summary,
        year=year_from(released),
        originally_available_at=released or None,
        duration=sum(durations) if durations else None,
        thumb=_first_image(payload.get("images")),
        studio=payload.get("label") or None,
        audience_rating=round(popularity / 10, 1) if isinstance(popularity, (int, float)) else None,
        genres=_tags(payload.get("genres") or []),
        contributors=_ordered((artist["name"], "Artist", None) for artist in artists),
        guids=_guids(
            [
                ("spotify", payload.get("id") or native_id),
                ("upc", external.get("upc")),
                ("ean", external.get("ean")),
                ("isrc", external.get("isrc")),
            ]
        ),
        tracks=tracks,
    )


def summarize_spotify_album(hit: dict[str, Any]) -> SearchResultItem:
    identifier = AgentIdentifier(Provider.SPOTIFY, MediaKind.ALBUM, str(hit["id"]))
    artists = [artist for artist in hit.get("artists") or [] if artist.get("name")]
    return SearchResultItem(
        rating_key=identifier.token,
        key=build_key(identifier),
        guid=build_guid(identifier),
        type=MediaKind.ALBUM.host_type_name,
        title=hit.get("name") or UNKNOWN_TITLE,
        year=year_from(hit.get("release_date")),
        thumb=_first_image(hit.get("images")),
        parent_title=artists[0]["name"] if artists else None,
    )


def _book_image(links: dict[str, Any] | None) -> str | None:
    links = links or {}
    return secure_url(next((links[size] for size in _BOOK_IMAGE_PREFERENCE if links.get(size)), None))


def _isbns(info: dict[str, Any]) -> tuple[str | None, str | None]:
    identifiers = info.get("industryIdentifiers") or []
    isbn_10 = next((i.get("identifier") for i in identifiers if i.get("type") == "ISBN_10"), None)
    isbn_13 = next((i.get("identifier") for i in identifiers if i.get("type") == "ISBN_13"), None)
    return isbn_10, isbn_13


def map_google_book(native_id: str, payload: dict[str, Any]) -> MetadataItem:
    identifier = AgentIdentifier(Provider.GOOGLE_BOOKS, MediaKind.BOOK, native_id)
    info = payload.get("volumeInfo") or {}
    authors = [author for author in info.get("authors") or [] if author]
    isbn_10, isbn_13 = _isbns(info)
    rating = info.get("averageRating")
    published = info.get("publishedDate")
    return MetadataItem(
        rating_key=identifier.token,
        key=build_key(identifier),
        guid=build_guid(identifier),
        type=MediaKind.BOOK.host_type_name,
        title=info.get("title") or UNKNOWN_TITLE,
        original_title=info.get("subtitle") or None,
        parent_title=authors[0] if authors else UNKNOWN_AUTHOR,
        summary=strip_markup(info.get("description")) or None,
        year=year_from(published),
        originally_available_at=published or None,
        thumb=_book_image(info.get("imageLinks")),
        studio=info.get("publisher") or None,
        audience_rating=round(float(rating) * 2, 1) if isinstance(rating, (int, float)) else None,
        genres=_tags(info.get("categories") or []),
        contributors=_ordered((author, "Author", None) for author in authors),
        guids=_guids(
            [
                ("isbn", isbn_13),
                ("isbn", isbn_10),
                ("googlebooks", payload.get("id") or native_id),
            ]
        ),
    )


def summarize_google_book(hit: dict[str, Any]) -> SearchResultItem:
    identifier = AgentIdentifier(Provider.GOOGLE_BOOKS, MediaKind.BOOK, str(hit["id"]))
    info = hit.get("volumeInfo") or {}
    authors = [author for author in info.get("authors") or [] if author]
    return SearchResultItem(
        rating_key=identifier.token,
        key=build_key(identifier),
        guid=build_guid(identifier),
        type=MediaKind.BOOK.host_type_name,
        title=info.get("title") or UNKNOWN_TITLE,
        year=year_from(info.get("publishedDate")),
        thumb=secure_url((info.get("imageLinks") or {}).get("thumbnail")),
        parent_title=authors[0] if authors else UNKNOWN_AUTHOR,
    )


NORMALIZERS: dict[tuple[Provider, MediaKind], DetailMapper] = {
    (Provider.TMDB, MediaKind.MOVIE): _tmdb_detail(MediaKind.MOVIE),
    (Provider.TMDB, MediaKind.SHOW): _tmdb_detail(MediaKind.SHOW),
    (Provider.SPOTIFY, MediaKind.ALBUM): map_spotify_album,
    (Provider.GOOGLE_BOOKS, MediaKind.BOOK): map_google_book,
}

SUMMARIZERS: dict[tuple[Provider, MediaKind], SummaryMapper] = {
    (Provider.TMDB, MediaKind.MOVIE): _tmdb_summary(MediaKind.MOVIE),
    (Provider.TMDB, MediaKind.SHOW): _tmdb_summary(MediaKind.SHOW),
    (Provider.SPOTIFY, MediaKind.ALBUM): summarize_spotify_album,
    (Provider.GOOGLE_BOOKS, MediaKind.BOOK): summarize_google_book,
}


def normalize(identifier: AgentIdentifier, payload: dict[str, Any]) -> MetadataItem:
    """Map a native detail payload to the canonical record."""
    return NORMALIZERS[(identifier.provider, identifier.kind)](identifier.native_id, payload)


def summarize(provider: Provider, kind: MediaKind, hits: Iterable[dict[str, Any]]) -> list[SearchResultItem]:
    """Map native search hits to result summaries, preserving upstream order."""
    mapper = SUMMARIZERS[(provider, kind)]
    return [mapper(hit) for hit in hits]
