"""Validate provider mapping manifests.

Besides schema validation, every manifest is checked against the stored
upstream samples: each field the normalizer emits for a sample must be
documented in the manifest's ``canonical`` block for that kind.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Iterable

from gateway.ingestion.identifiers import AgentIdentifier
from gateway.ingestion.mapping_schema import MappingManifest, load_mapping_manifest, validate_mapping_paths
from gateway.ingestion.normalizers import normalize
from gateway.models.media import MediaKind, Provider
from gateway.samples.ingestion import load_ingestion_sample

# Fields derived from ratingKey rather than mapped from the payload.
DERIVED_FIELDS = frozenset({"key", "guid"})

# (provider, kind) -> (sample name, native id)
SAMPLE_RECORDS: dict[tuple[Provider, MediaKind], tuple[str, str]] = {
    (Provider.TMDB, MediaKind.MOVIE): ("tmdb_movie", "603"),
    (Provider.TMDB, MediaKind.SHOW): ("tmdb_show", "1399"),
    (Provider.SPOTIFY, MediaKind.ALBUM): ("spotify_album", "4aawyAB9vmqN3uQ7FjRGTy"),
    (Provider.GOOGLE_BOOKS, MediaKind.BOOK): ("google_book", "zyTCAlFPjgYC"),
}


def emitted_fields(provider: Provider, kind: MediaKind) -> set[str] | None:
    """Wire fields carrying a value when the stored sample is normalized."""
    sample = SAMPLE_RECORDS.get((provider, kind))
    if sample is None:
        return None
    name, native_id = sample
    wire = normalize(AgentIdentifier(provider, kind, native_id), load_ingestion_sample(name)).to_wire()
    return {field for field, value in wire.items() if value not in ([], "")} - DERIVED_FIELDS


def undocumented_fields(path: Path, manifest: MappingManifest) -> list[str]:
    """Report emitted fields a manifest does not document."""
    errors: list[str] = []
    for kind, fields in manifest.canonical.items():
        emitted = emitted_fields(manifest.source, kind)
        if emitted is None:
            continue
        for field_name in sorted(emitted - set(fields)):
            errors.append(f"{path}: canonical.{kind.value}.{field_name} is emitted but not documented")
    return errors


def check_sample_coverage(paths: Iterable[Path]) -> list[str]:
    errors: list[str] = []
    for path in paths:
        errors.extend(undocumented_fields(path, load_mapping_manifest(path)))
    return errors


def _collect_mapping_files(target: Path) -> list[Path]:
    if target.is_dir():
        return sorted(target.glob("*.yaml")) + sorted(target.glob("*.yml"))
    if target.is_file():
        return [target]
    raise FileNotFoundError(f"Path not found: {target}")


def main(argv: list[str] | None = None) -> int:
    repo_root = Path(__file__).resolve().parents[3]
    default_path = repo_root / "mappings"

    parser = argparse.ArgumentParser(description="Validate provider mapping manifests")
    parser.add_argument(
        "--path",
        default=str(default_path),
        help="Path to a mapping file or directory (default: mappings/)",
    )
    parser.add_argument(
        "--skip-samples",
        action="store_true",
        help="Only validate the manifest schema; skip the stored-sample coverage check",
    )
    args = parser.parse_args(argv)
    target = Path(args.path).resolve()

    paths = _collect_mapping_files(target)
    errors = validate_mapping_paths(paths)
    if not errors and not args.skip_samples:
        errors = check_sample_coverage(paths)
    if errors:
        for error in errors:
            print(error)
        return 1

    checked = "schema" if args.skip_samples else "schema and sample coverage"
    print(f"Validated {len(paths)} mapping file(s) ({checked}).")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
