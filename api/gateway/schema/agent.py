"""Canonical record and envelope schemas in the host agent's wire shape.

Invariants:
- List fields default to empty lists and are serialized even when empty.
- Records are frozen once constructed.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class WireModel(BaseModel):
    """Base for host-facing models serialized by alias."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Tag(WireModel):
    tag: str


class Contributor(WireModel):
    tag: str
    role: str
    thumb: str | None = None
    order: int = Field(ge=1)


class ExternalGuid(WireModel):
    id: str


class Track(WireModel):
    index: int = Field(ge=1)
    title: str
    duration: int | None = None


class SearchResultItem(WireModel):
    """Reduced projection used in match responses."""
    rating_key: str = Field(alias="ratingKey")
    key: str
    guid: str
    type: str
    title: str
    year: int | None = None
    thumb: str | None = None
    parent_title: str | None = Field(default=None, alias="parentTitle")


class MetadataItem(WireModel):
    """Canonical media record returned by detail lookups."""
    rating_key: str = Field(alias="ratingKey")
    key: str
    guid: str
    type: str
    title: str
    original_title: str | None = Field(default=None, alias="originalTitle")
    parent_title: str | None = Field(default=None, alias="parentTitle")
    summary: str | None = None
    year: int | None = None
    originally_available_at: str | None = Field(default=None, alias="originallyAvailableAt")
    duration: int | None = None
    content_rating: str | None = Field(default=None, alias="contentRating")
    thumb: str | None = None
    art: str | None = None
    studio: str | None = None
    audience_rating: float | None = Field(default=None, alias="audienceRating")
    genres: list[Tag] = Field(default_factory=list, alias="Genre")
    contributors: list[Contributor] = Field(default_factory=list, alias="Role")
    guids: list[ExternalGuid] = Field(default_factory=list, alias="Guid")
    similar: list[Tag] = Field(default_factory=list, alias="Similar")
    tracks: list[Track] = Field(default_factory=list, alias="Track")


class MediaContainer(WireModel):
    """Envelope wrapping search and detail results."""
    identifier: str
    metadata: list[SearchResultItem | MetadataItem] = Field(default_factory=list, alias="Metadata")
    offset: int = 0

    @property
    def size(self) -> int:
        return len(self.metadata)

    def to_wire(self) -> dict[str, Any]:
        return {
            "MediaContainer": {
                "offset": self.offset,
                "totalSize": self.size,
                "size": self.size,
                "identifier": self.identifier,
                "Metadata": [item.to_wire() for item in self.metadata],
            }
        }


class SchemeEntry(WireModel):
    scheme: str


class ProviderType(WireModel):
    type: int
    schemes: list[SchemeEntry] = Field(alias="Scheme")


class ProviderFeature(WireModel):
    type: str
    key: str


class MediaProviderManifest(WireModel):
    """Provider manifest served from the root path."""
    identifier: str
    title: str
    version: str
    types: list[ProviderType] = Field(alias="Types")
    features: list[ProviderFeature] = Field(alias="Feature")

    def to_wire(self) -> dict[str, Any]:
        return {"MediaProvider": super().to_wire()}
