# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Assembly of converted practices into standards following a group mapping."""

import logging
from collections import Counter
from typing import Callable

from lpi.mapping import GroupMapping
from lpi.model import (
    Practice,
    ValidatedRule,
    ValidatedStandard,
    ValidationOutput,
    name_key,
)

logger = logging.getLogger(__name__)

UNCATEGORIZED_GROUP_NAME: str = "Uncategorized"
UNKNOWN_SOURCE_NAME: str = "Unknown Space"


def build_standard_description(practices: list[Practice]) -> str:
    """Build a standard description from its member practices.

    Each member contributes a ``## {ordinal}. {name}`` heading followed by its
    description indented by three spaces; members are separated by a blank line.

    Args:
        practices: Member practices in group order.

    Returns:
        Description text.
    """
    sections = []
    for ordinal, practice in enumerate(practices, start=1):
        indented = "\n".join(f"   {line}" for line in practice.description.split("\n"))
        sections.append(f"## {ordinal}. {practice.name}\n{indented}")
    return "\n\n".join(sections)


def primary_source_name(practices: list[Practice], source_names: dict[str, str]) -> str:
    """Return the most frequent source collection name among practices.

    Ties go to the name counted first.

    Args:
        practices: Practices of one collection.
        source_names: Source collection id to display name.

    Returns:
        Collection name, or ``UNKNOWN_SOURCE_NAME`` when there are no practices.
    """
    counts = Counter(
        source_names.get(practice.space, UNKNOWN_SOURCE_NAME) for practice in practices
    )
    if not counts:
        return UNKNOWN_SOURCE_NAME
    return counts.most_common(1)[0][0]


class StandardAssembler:
    """Group converted rules into standards."""

    def __init__(
        self,
        convert: Callable[[Practice], ValidatedRule],
        source_names: dict[str, str],
    ) -> None:
        """Initialize assembler.

        Args:
            convert: Practice to rule conversion.
            source_names: Read-only source collection id to display name lookup.
        """
        self._convert = convert
        self._source_names = source_names

    def assemble(
        self, practices: list[Practice], mapping: GroupMapping
    ) -> ValidationOutput:
        """Build the standards of one collection.

        Args:
            practices: All practices of the collection.
            mapping: Group mapping naming the members of each standard.

        Returns:
            Validation document; empty groups are omitted and practices absent
            from the mapping are gathered in an ``Uncategorized`` standard.
        """
        group_by_key: dict[str, str] = {}
        position_by_key: dict[str, int] = {}
        for group in mapping.groups:
            for position, member in enumerate(group.members):
                key = name_key(member)
                if key in group_by_key:
                    logger.warning(
                        f"Practice listed in several groups, keeping first "
                        f"(practice={member!r} kept_in={group_by_key[key]!r} "
                        f"ignored={group.name!r})"
                    )
                    continue
                group_by_key[key] = group.name
                position_by_key[key] = position

        matched: dict[str, list[Practice]] = {}
        unmatched: list[Practice] = []
        for practice in practices:
            group_name = group_by_key.get(name_key(practice.name))
            if group_name is None:
                unmatched.append(practice)
            else:
                matched.setdefault(group_name, []).append(practice)

        if unmatched:
            logger.warning(
                f"{len(unmatched)} practice(s) not found in standards mapping "
                f"(practices={[practice.name for practice in unmatched]})"
            )

        prefix = primary_source_name(practices, self._source_names)
        standards: list[ValidatedStandard] = []
        emitted: set[str] = set()
        for group in mapping.groups:
            if group.name in emitted:
                continue
            members = matched.get(group.name, [])
            if not members:
                logger.debug("standard_skipped name=%s reason=empty", group.name)
                continue
            emitted.add(group.name)
            ordered = sorted(
                members, key=lambda practice: position_by_key[name_key(practice.name)]
            )
            standards.append(self._build_standard(f"{prefix} - {group.name}", ordered))

        if unmatched:
            standards.append(
                self._build_standard(f"{prefix} - {UNCATEGORIZED_GROUP_NAME}", unmatched)
            )
        return ValidationOutput(standards=standards)

    def _build_standard(self, name: str, practices: list[Practice]) -> ValidatedStandard:
        return ValidatedStandard(
            name=name,
            description=build_standard_description(practices),
            rules=[self._convert(practice) for practice in practices],
        )
