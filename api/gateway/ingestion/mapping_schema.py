"""Schema validation for provider mapping manifests.

Each manifest under ``mappings/`` documents which upstream field feeds which
canonical record field for one provider. Validation checks the manifest
against the live ``MetadataItem`` schema so a renamed field shows up as a
manifest error.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from gateway.models.media import PROVIDER_KINDS, MediaKind, Provider
from gateway.schema.agent import MetadataItem

_REQUIRED_FIELDS = {"ratingKey", "type", "title"}


def canonical_field_names() -> set[str]:
    """Wire names of every canonical record field."""
    return {field.alias or name for name, field in MetadataItem.model_fields.items()}


class CrossReferenceMapping(BaseModel):
    """Mapping entry for an emitted ``scheme://value`` cross reference."""

    scheme: str
    upstream: str


class RawOnlyMapping(BaseModel):
    """Mapping entry for upstream fields deliberately left unmapped."""

    upstream: str
    reason: str


class MappingManifest(BaseModel):
    """Top-level mapping manifest."""

    source: Provider
    canonical: dict[MediaKind, dict[str, str]]
    cross_references: list[CrossReferenceMapping] = Field(default_factory=list)
    raw_only: list[RawOnlyMapping] = Field(default_factory=list)
    data_notes: list[str] = Field(default_factory=list)

    model_config = {"extra": "forbid"}

    @field_validator("canonical")
    @classmethod
    def _validate_canonical(cls, value: dict[MediaKind, dict[str, str]]) -> dict[MediaKind, dict[str, str]]:
        known = canonical_field_names()
        for kind, fields in value.items():
            if not isinstance(fields, dict) or not fields:
                raise ValueError(f"canonical.{kind.value} must map fields to source paths")
            missing = _REQUIRED_FIELDS - set(fields)
            if missing:
                raise ValueError(f"canonical.{kind.value} is missing {', '.join(sorted(missing))}")
            for field_name, source_path in fields.items():
                if field_name not in known:
                    raise ValueError(f"canonical.{kind.value}.{field_name} is not a canonical field")
                if not isinstance(source_path, str) or not source_path.strip():
                    raise ValueError(f"canonical.{kind.value}.{field_name} must be a string path")
        return value

    @model_validator(mode="after")
    def _validate_kinds(self) -> "MappingManifest":
        served = set(PROVIDER_KINDS[self.source])
        declared = set(self.canonical)
        if declared != served:
            expected = ", ".join(sorted(kind.value for kind in served))
            raise ValueError(f"{self.source.value} manifest must map exactly: {expected}")
        return self


def load_mapping_manifest(path: Path) -> MappingManifest:
    """Load and validate a mapping manifest from YAML."""
    data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("mapping manifest must be a YAML mapping")
    return MappingManifest.model_validate(data)


def validate_mapping_file(path: Path) -> list[str]:
    """Validate a single mapping file and return any errors."""
    errors: list[str] = []
    try:
        manifest = load_mapping_manifest(path)
    except (ValidationError, ValueError) as exc:
        errors.append(f"{path}: {exc}")
        return errors
    if manifest.source.value != path.stem:
        errors.append(
            f"{path}: source '{manifest.source.value}' does not match file name '{path.stem}'"
        )
    return errors


def validate_mapping_paths(paths: Iterable[Path]) -> list[str]:
    """Validate mapping manifests and collect error messages."""
    errors: list[str] = []
    for path in paths:
        errors.extend(validate_mapping_file(path))
    return errors
