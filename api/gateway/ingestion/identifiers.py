"""Opaque identifier codec.

Tokens take the form ``<provider-prefix>-<kind>-<native id>``, for example
``tmdb-movie-603`` or ``google-book-zyTCAlFPjgYC``. The host may hand a token
back wrapped in a guid URI (``tv.plex.agents.custom.metagate://movie/tmdb-movie-603``)
or a library path (``/library/metadata/tmdb-movie-603``); decoding strips any
such wrapping down to the trailing segment first.

Invariants:
- ``decode(encode(p, k, n)) == AgentIdentifier(p, k, n)`` for every supported pair.
- Every decoded identifier re-encodes; native ids holding whitespace or
  ``/ ? # %`` are rejected on both sides.
- Prefixes are matched in ``PREFIX_PRIORITY`` order; no prefix is a prefix of another.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import unquote, urlsplit

from gateway.core.config import settings
from gateway.models.media import MediaKind, Provider


class UnrecognizedIdentifier(ValueError):
    """Raised when a token matches no known provider prefix or carries an unusable native id."""


PREFIX_PRIORITY: tuple[tuple[str, Provider, MediaKind], ...] = (
    ("tmdb-movie-", Provider.TMDB, MediaKind.MOVIE),
    ("tmdb-show-", Provider.TMDB, MediaKind.SHOW),
    ("spotify-album-", Provider.SPOTIFY, MediaKind.ALBUM),
    ("google-book-", Provider.GOOGLE_BOOKS, MediaKind.BOOK),
)

_RESERVED_CHARS = frozenset("/?#%")

_PREFIXES: dict[tuple[Provider, MediaKind], str] = {
    (provider, kind): prefix for prefix, provider, kind in PREFIX_PRIORITY
}


def _has_reserved(native_id: str) -> bool:
    return any(char.isspace() or char in _RESERVED_CHARS for char in native_id)


@dataclass(frozen=True, slots=True)
class AgentIdentifier:
    """Decoded identifier naming one item at one provider."""
    provider: Provider
    kind: MediaKind
    native_id: str

    @property
    def token(self) -> str:
        return encode(self.provider, self.kind, self.native_id)


def encode(provider: Provider, kind: MediaKind, native_id: str) -> str:
    """Serialize a provider/kind/native id triple into a single token."""
    prefix = _PREFIXES.get((Provider(provider), MediaKind(kind)))
    if prefix is None:
        raise ValueError(f"{provider} does not serve {kind} items")
    native = str(native_id)
    if not native:
        raise ValueError("native id must be non-empty")
    if _has_reserved(native):
        raise ValueError(f"native id {native!r} contains reserved characters")
    return f"{prefix}{native}"


def _trailing_segment(raw: str) -> str:
    """Strip scheme, host, path, query and fragment down to the last segment."""
    value = raw.strip()
    if "://" in value:
        parts = urlsplit(value)
        value = f"{parts.netloc}{parts.path}"
    else:
        value = value.split("#", 1)[0].split("?", 1)[0]
    segments = [segment for segment in value.split("/") if segment]
    return unquote(segments[-1]).strip() if segments else ""


def decode(token: str) -> AgentIdentifier:
    """Decode a bare or URI-wrapped token into an ``AgentIdentifier``."""
    if not token:
        raise UnrecognizedIdentifier("empty identifier")
    candidate = _trailing_segment(token)
    for prefix, provider, kind in PREFIX_PRIORITY:
        if candidate.startswith(prefix):
            native_id = candidate[len(prefix):]
            if not native_id:
                break
            if _has_reserved(native_id):
                raise UnrecognizedIdentifier(f"Identifier {token!r} carries reserved characters")
            return AgentIdentifier(provider=provider, kind=kind, native_id=native_id)
    raise UnrecognizedIdentifier(f"Unrecognized identifier {token!r}")


def identify_provider(token: str) -> Provider:
    """Return the provider owning a token."""
    return decode(token).provider


def build_key(identifier: AgentIdentifier) -> str:
    """Host library path for the item."""
    return f"/library/metadata/{identifier.token}"


def build_guid(identifier: AgentIdentifier) -> str:
    """Host guid URI embedding the kind as a path segment."""
    return f"{settings.provider_identifier}://{identifier.kind.host_type_name}/{identifier.token}"
