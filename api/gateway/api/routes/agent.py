"""Host agent routes: provider manifest, match search and metadata lookup."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from gateway.api.deps import get_gateway
from gateway.core.config import settings
from gateway.models.media import MediaKind
from gateway.schema.agent import MediaProviderManifest, ProviderFeature, ProviderType, SchemeEntry
from gateway.services.dispatcher import Dispatcher, first_present

router = APIRouter()

MANIFEST_KINDS = (MediaKind.MOVIE, MediaKind.SHOW, MediaKind.ALBUM)


def build_manifest() -> MediaProviderManifest:
    scheme = [SchemeEntry(scheme=settings.provider_identifier)]
    return MediaProviderManifest(
        identifier=settings.provider_identifier,
        title=settings.provider_title,
        version=settings.provider_version,
        types=[ProviderType(type=kind.host_type, schemes=scheme) for kind in MANIFEST_KINDS],
        features=[
            ProviderFeature(type="metadata", key="/library/metadata"),
            ProviderFeature(type="match", key="/library/metadata/matches"),
        ],
    )


@router.get("/")
@router.get("/manifest")
async def manifest() -> dict[str, Any]:
    return build_manifest().to_wire()


@router.get("/search")
@router.get("/plex/search")
@router.get("/library/metadata/matches")
async def search(
    query: str | None = Query(default=None),
    title: str | None = Query(default=None),
    year: str | None = Query(default=None),
    type_: str | None = Query(default=None, alias="type"),
    gateway: Dispatcher = Depends(get_gateway),
) -> dict[str, Any]:
    container = await gateway.search(first_present(query, title), type_, year)
    return container.to_wire()


@router.get("/metadata")
@router.get("/plex/metadata")
async def metadata(
    id_: str | None = Query(default=None, alias="id"),
    rating_key: str | None = Query(default=None, alias="ratingKey"),
    guid: str | None = Query(default=None),
    gateway: Dispatcher = Depends(get_gateway),
) -> dict[str, Any]:
    container = await gateway.detail(first_present(id_, rating_key, guid))
    return container.to_wire()


@router.get("/library/metadata/{rating_key}")
async def metadata_by_path(rating_key: str, gateway: Dispatcher = Depends(get_gateway)) -> dict[str, Any]:
    container = await gateway.detail(rating_key)
    return container.to_wire()
