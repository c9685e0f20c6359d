# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Group mapping model and its YAML document format."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


class MalformedMappingError(ValueError):
    """Represent a document that does not have the group mapping shape."""


@dataclass
class Group:
    """Represent one group of practices.

    Attributes:
        name: Group (standard) name.
        description: Short description of what the group covers.
        members: Practice names, matched case-insensitively.
    """

    name: str
    description: str = ""
    members: list[str] = field(default_factory=list)


@dataclass
class GroupMapping:
    """Represent an ordered list of groups."""

    groups: list[Group] = field(default_factory=list)

    def member_count(self) -> int:
        """Return the number of member entries across all groups."""
        return sum(len(group.members) for group in self.groups)


def mapping_from_data(data: Any) -> GroupMapping:
    """Build a group mapping from decoded YAML data.

    Expected shape: ``{standards: [{name, description?, practices?: [...]}]}``.

    Args:
        data: Decoded document.

    Returns:
        Parsed mapping.

    Raises:
        MalformedMappingError: If the document does not have the expected shape.
    """
    if not isinstance(data, dict):
        raise MalformedMappingError("Mapping document must be a mapping")
    raw_groups = data.get("standards")
    if not isinstance(raw_groups, list):
        raise MalformedMappingError("Mapping document is missing a 'standards' list")

    groups: list[Group] = []
    for index, raw in enumerate(raw_groups):
        if not isinstance(raw, dict):
            raise MalformedMappingError(f"Standard #{index + 1} is not a mapping")
        name = raw.get("name")
        if not isinstance(name, str) or not name.strip():
            raise MalformedMappingError(f"Standard #{index + 1} has no name")
        description = raw.get("description") or ""
        if not isinstance(description, str):
            raise MalformedMappingError(
                f"Standard '{name}' has a non-text description"
            )
        members = raw.get("practices") or []
        if not isinstance(members, list):
            raise MalformedMappingError(f"Standard '{name}' practices is not a list")
        groups.append(
            Group(
                name=name,
                description=description,
                members=[str(member) for member in members if member is not None],
            )
        )
    return GroupMapping(groups=groups)


def mapping_to_data(mapping: GroupMapping) -> dict[str, Any]:
    """Serialize a group mapping to its document shape.

    Args:
        mapping: Group mapping.

    Returns:
        Plain data ready for YAML dumping.
    """
    return {
        "standards": [
            {
                "name": group.name,
                "description": group.description,
                "practices": list(group.members),
            }
            for group in mapping.groups
        ]
    }


def dump_yaml(data: Any) -> str:
    """Render data as block-style YAML without line wrapping.

    Args:
        data: Plain data.

    Returns:
        YAML text.
    """
    return yaml.safe_dump(
        data,
        sort_keys=False,
        allow_unicode=True,
        width=float("inf"),
        default_flow_style=False,
    )


def load_group_mapping(path: Path) -> GroupMapping:
    """Load a group mapping file.

    Args:
        path: Mapping file path.

    Returns:
        Parsed mapping.

    Raises:
        OSError: If the file cannot be read.
        MalformedMappingError: If the file is not valid mapping YAML.
    """
    text = path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        logger.warning(f"Mapping file is not valid YAML (path={path} error={exc})")
        raise MalformedMappingError(str(exc)) from exc
    return mapping_from_data(data)


def write_group_mapping(path: Path, mapping: GroupMapping) -> None:
    """Write a group mapping file.

    Args:
        path: Target path.
        mapping: Group mapping.

    Raises:
        OSError: If the file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_yaml(mapping_to_data(mapping)), encoding="utf-8")
