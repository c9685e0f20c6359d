# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Workspace layout: collection exports and per-collection artifacts."""

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path

from lpi.source_api import SourceCollection

logger = logging.getLogger(__name__)

SPACES_FILE_NAME: str = "spaces.json"
EXPORT_SUFFIX: str = ".jsonl"
PRACTICES_SUFFIX: str = ".yaml"
MINIFIED_SUFFIX: str = ".minified.yaml"
MAPPING_SUFFIX: str = ".standards-mapping.yaml"
VALIDATION_SUFFIX: str = ".standards-validation.json"

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHEN_RUNS = re.compile(r"-+")


class WorkspaceError(RuntimeError):
    """Represent missing or unusable workspace artifacts."""


def slugify(name: str) -> str:
    """Convert a collection name to a file-name slug.

    Args:
        name: Collection display name.

    Returns:
        Lowercase slug of ``[a-z0-9-]`` characters without edge hyphens.
    """
    slug = _WHITESPACE.sub("-", name.lower())
    slug = _NON_SLUG_CHARS.sub("-", slug)
    slug = _HYPHEN_RUNS.sub("-", slug)
    return slug.strip("-")


@dataclass(frozen=True)
class Workspace:
    """Resolve artifact paths inside the workspace directory."""

    root: Path

    @property
    def spaces_path(self) -> Path:
        return self.root / SPACES_FILE_NAME

    def practices_path(self, slug: str) -> Path:
        return self.root / f"{slug}{PRACTICES_SUFFIX}"

    def minified_path(self, slug: str) -> Path:
        return self.root / f"{slug}{MINIFIED_SUFFIX}"

    def mapping_path(self, slug: str) -> Path:
        return self.root / f"{slug}{MAPPING_SUFFIX}"

    def validation_path(self, slug: str) -> Path:
        return self.root / f"{slug}{VALIDATION_SUFFIX}"

    def export_files(self) -> list[Path]:
        """Return the collection exports, sorted by file name."""
        return self._discover(EXPORT_SUFFIX)

    def minified_files(self) -> list[Path]:
        """Return the minified practice documents, sorted by file name."""
        return self._discover(MINIFIED_SUFFIX)

    def mapping_files(self) -> list[Path]:
        """Return the group mapping files, sorted by file name."""
        return self._discover(MAPPING_SUFFIX)

    def validation_files(self) -> list[Path]:
        """Return the validation documents, sorted by file name."""
        return self._discover(VALIDATION_SUFFIX)

    def _discover(self, suffix: str) -> list[Path]:
        if not self.root.is_dir():
            return []
        return sorted(
            path
            for path in self.root.iterdir()
            if path.is_file() and path.name.endswith(suffix)
        )


def slug_from_artifact(path: Path, suffix: str) -> str | None:
    """Extract the collection slug from an artifact file name.

    Args:
        path: Artifact path.
        suffix: Artifact suffix, e.g. ``MAPPING_SUFFIX``.

    Returns:
        Slug, or ``None`` when the name does not carry one.
    """
    name = path.name
    if not name.endswith(suffix) or len(name) == len(suffix):
        return None
    return name[: -len(suffix)]


def write_spaces(path: Path, collections: list[SourceCollection]) -> None:
    """Write the source catalog as ``[{_id, name}]`` JSON.

    Args:
        path: Target path.
        collections: Source collections.

    Raises:
        OSError: If the file cannot be written.
    """
    payload = [{"_id": item.id, "name": item.name} for item in collections]
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def load_spaces(path: Path) -> dict[str, str]:
    """Load the source catalog as an id to name lookup.

    Args:
        path: ``spaces.json`` path.

    Returns:
        Collection names keyed by collection id.

    Raises:
        WorkspaceError: If the file is missing or malformed.
    """
    if not path.exists():
        raise WorkspaceError(
            f"Spaces file not found: {path}. Run get-spaces to fetch the source "
            f"catalog first."
        )
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
        return {str(item["_id"]): str(item["name"]) for item in payload}
    except (OSError, ValueError, TypeError, KeyError) as exc:
        logger.warning(f"Spaces file is unreadable (path={path} error={exc})")
        raise WorkspaceError(f"Spaces file is malformed: {path}") from exc


def slug_to_source_id(source_names: dict[str, str]) -> dict[str, str]:
    """Build the reverse lookup from collection slug to collection id."""
    return {slugify(name): source_id for source_id, name in source_names.items()}
