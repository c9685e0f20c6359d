# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""LLM-driven grouping of practices with completeness repair.

The controller asks the LLM for a grouping, then validates it: duplicated
members are resolved by a random pick of one owning group, missing members
are re-submitted in focused prompts restricted to the existing groups, and
whatever is still missing after the last attempt lands in a fallback group.
After ``run`` returns every input name appears in exactly one group.
"""

import locale
import logging
import math
import random
import re
from dataclasses import dataclass, field

import yaml

from lpi.llm_client import LLMClient
from lpi.mapping import (
    Group,
    GroupMapping,
    MalformedMappingError,
    dump_yaml,
    mapping_from_data,
)
from lpi.model import name_key

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS: int = 5
MIN_GROUP_SIZE: int = 3
ITEMS_PER_GROUP: int = 5
MIN_GROUP_COUNT: int = 2
MAX_GROUP_COUNT: int = 10
REPAIR_DESCRIPTION_LIMIT: int = 200

FALLBACK_GROUP_NAME: str = "To Categorize"
FALLBACK_GROUP_DESCRIPTION: str = (
    "Practices that could not be automatically categorized after multiple attempts"
)

_ITEM_MARKER = re.compile(r"^\s*- name:", re.MULTILINE)
_FENCED_BLOCK = re.compile(r"```ya?ml\n(.*?)```", re.DOTALL)


class MalformedResponseError(MalformedMappingError):
    """Represent an LLM response that does not decode into a group mapping."""


@dataclass(frozen=True)
class ClusterItem:
    """Represent one practice submitted for grouping."""

    name: str
    description: str = ""
    categories: tuple[str, ...] = ()


@dataclass(frozen=True)
class ClusteringResult:
    """Represent the outcome of one clustering run.

    Attributes:
        mapping: Validated group mapping.
        attempts: Validation attempts performed (1 when the first answer was
            complete).
        repair_rounds: Focused re-prompts sent.
        duplicates_removed: Member entries removed by duplicate resolution.
        fallback_members: Names placed in the fallback group.
    """

    mapping: GroupMapping
    attempts: int
    repair_rounds: int
    duplicates_removed: int
    fallback_members: list[str] = field(default_factory=list)


def count_items(document: str) -> int:
    """Count practice entries in a YAML document by their ``- name:`` marker.

    Args:
        document: Practice document text.

    Returns:
        Number of marker lines.
    """
    return len(_ITEM_MARKER.findall(document))


def max_group_count(item_count: int) -> int:
    """Return the group budget for a number of items.

    Args:
        item_count: Number of practices to group.

    Returns:
        ``ceil(item_count / 5)`` clamped to ``[2, 10]``.
    """
    return max(
        MIN_GROUP_COUNT, min(MAX_GROUP_COUNT, math.ceil(item_count / ITEMS_PER_GROUP))
    )


def render_items_document(items: list[ClusterItem]) -> str:
    """Render items as the YAML document embedded in the clustering prompt.

    Args:
        items: Items to group.

    Returns:
        YAML text with one ``- name:`` entry per item.
    """
    return dump_yaml(
        {
            "practices": [
                {
                    "name": item.name,
                    "description": item.description,
                    "categories": list(item.categories),
                }
                for item in items
            ]
        }
    )


def build_clustering_prompt(document: str) -> str:
    """Build the initial grouping prompt.

    Args:
        document: YAML document listing the practices.

    Returns:
        Prompt text.
    """
    item_count = count_items(document)
    max_groups = max_group_count(item_count)
    return f"""You are an expert software engineer tasked with categorizing coding practices into meaningful categories.

## Task
Analyze the following coding practices and create a categorization scheme that groups them logically.

## Hard Constraints (MUST be followed)
- Create AT MOST {max_groups} standards (you have {item_count} practices to categorize)
- Each standard MUST contain AT LEAST {MIN_GROUP_SIZE} practices - no single-practice or two-practice standards
- Prefer FEWER, BROADER standards over many narrow ones
- If in doubt, merge related practices into one standard
- **ABSOLUTE RULE: Each practice must appear in EXACTLY ONE standard - ZERO DUPLICATES**
- Standard names should be clear, concise, and descriptive

## Consolidation Principles (IMPORTANT)
- Group by BROAD THEMES (e.g., "Code Quality & Readability" not just "Naming Conventions")
- Merge related concepts: error handling + validation can share one standard
- Technology-specific practices (Kafka, Avro, Liquibase, Maven) can share a "Platform & Infrastructure" standard
- Language-specific idioms (Java Clock, specific APIs) can merge into "Code Quality" or a broader language standard
- Only create separate standards when practices are fundamentally different in nature (e.g., Testing vs Architecture)

## Anti-patterns to AVOID
- Creating "Avro Schema Design" and "Kafka Practices" as separate standards -> merge into "Messaging & Schema Standards"
- Creating "Java Language Usage" for 1-2 practices -> merge into broader "Code Quality" or "Clean Code"
- Creating narrow standards like "SOLID Principles" with only 1-2 practices -> merge into "Design Principles" or "Architecture"
- One or two practices per standard is NEVER acceptable

## CRITICAL: Testing Category Priority (READ CAREFULLY)

**ALL practices containing ANY of these keywords MUST go EXCLUSIVELY in "Testing Best Practices":**
- "mock" (including "mocks", "mock data", "mock value", "mock files")
- "test" (including "tests", "unit test", "test data")

**CONCRETE EXAMPLES - follow these exactly:**
- "naming mock value" -> Testing Best Practices (NOT Naming Conventions)
- "Use distinct mock data for tests" -> Testing Best Practices (NOT Clean Code)
- "Use base mocks for variations" -> Testing Best Practices (NOT Clean Code)
- "Use mock files for test data in unit tests" -> Testing Best Practices

**WHY:** Mock-related practices are fundamentally about testing methodology. Even if they mention "naming" or improve "readability", their primary domain is testing.

## Secondary Priority Rules
When a practice could fit multiple categories (and is NOT testing-related):
1. **Consolidate first**: Always try to merge into an existing broader standard
2. **Domain-specific over generic**: Prefer specialized categories (e.g., "Compose Best Practices" over "Code Style")
3. **Primary intent**: Categorize by PRIMARY purpose, not secondary aspects

## FORBIDDEN - These mistakes will invalidate your output:
1. Placing the same practice in multiple standards
2. Placing any "mock" or "test" related practice outside "Testing Best Practices"
3. Missing any practice from the input
4. Creating more than {max_groups} standards
5. Creating any standard with fewer than {MIN_GROUP_SIZE} practices

## Output Format
Return ONLY valid YAML with this structure:

```yaml
standards:
  - name: "Standard Name"
    description: "Brief description of what this standard covers"
    practices:
      - "Exact Practice Name 1"
      - "Exact Practice Name 2"
```

## Final Verification (do this before outputting):
1. Count total practices in output - must equal {item_count}
2. Count standards - must be AT MOST {max_groups}
3. Check each standard has AT LEAST {MIN_GROUP_SIZE} practices
4. Search for "mock" in your output - ALL must be in "Testing Best Practices"
5. Check no practice name appears twice across all standards

## Coding Practices to Categorize

{document}"""


def build_repair_prompt(
    missing: list[str],
    groups: list[Group],
    descriptions: dict[str, str],
) -> str:
    """Build a focused prompt placing missing practices into existing groups.

    Args:
        missing: Names of uncategorized practices.
        groups: Existing groups; the only allowed targets.
        descriptions: Practice descriptions keyed by ``name_key``.

    Returns:
        Prompt text.
    """
    groups_list = "\n".join(
        f"{index}. **{group.name}**: {group.description}"
        for index, group in enumerate(groups, start=1)
    )
    practice_lines = []
    for name in missing:
        description = descriptions.get(name_key(name), "")
        if len(description) > REPAIR_DESCRIPTION_LIMIT:
            description = description[:REPAIR_DESCRIPTION_LIMIT] + "..."
        practice_lines.append(f"- **{name}**: {description}")
    practices_list = "\n".join(practice_lines)

    return f"""You are an expert software engineer tasked with categorizing coding practices.

## Task
The following practices were not categorized in the initial pass. You MUST assign each one to ONE of the existing standards below.

## CRITICAL RULES
1. **DO NOT create new standards** - only use the standards listed below
2. Each practice MUST be assigned to exactly ONE standard
3. Use the exact practice name as provided (do not modify it)

## Existing Standards (you MUST pick from these)

{groups_list}

## Practices to Categorize

{practices_list}

## Output Format
Return ONLY valid YAML with this exact structure:

```yaml
standards:
  - name: "Exact Standard Name From List Above"
    practices:
      - "Exact Practice Name 1"
  - name: "Another Standard Name"
    practices:
      - "Exact Practice Name 2"
```

Note: Only include standards that have practices assigned to them. Do not include empty standards."""


def extract_structured_block(response: str) -> str:
    """Return the first fenced YAML block of a response, or the whole response.

    Args:
        response: Raw LLM response.

    Returns:
        YAML text.
    """
    match = _FENCED_BLOCK.search(response)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return response.strip()


def parse_mapping_response(response: str) -> GroupMapping:
    """Parse an LLM response into a group mapping.

    Args:
        response: Raw LLM response.

    Returns:
        Parsed mapping.

    Raises:
        MalformedResponseError: If the response is not YAML of the mapping shape.
    """
    try:
        data = yaml.safe_load(extract_structured_block(response))
    except yaml.YAMLError as exc:
        raise MalformedResponseError(f"Response is not valid YAML: {exc}") from exc
    try:
        return mapping_from_data(data)
    except MalformedMappingError as exc:
        raise MalformedResponseError(f"Invalid LLM response: {exc}") from exc


def discard_unknown_members(mapping: GroupMapping, known: dict[str, str]) -> int:
    """Drop members that match no input item and restore original spelling.

    Args:
        mapping: Mapping to clean in place.
        known: Original item names keyed by ``name_key``.

    Returns:
        Number of members dropped.
    """
    dropped = 0
    for group in mapping.groups:
        kept: list[str] = []
        for member in group.members:
            original = known.get(name_key(member))
            if original is None:
                logger.warning(
                    f"Dropping unknown practice from mapping "
                    f"(group={group.name!r} practice={member!r})"
                )
                dropped += 1
                continue
            kept.append(original)
        group.members = kept
    return dropped


def remove_duplicates_randomly(mapping: GroupMapping, rng: random.Random) -> int:
    """Keep each duplicated member in one randomly chosen occurrence.

    Args:
        mapping: Mapping to clean in place.
        rng: Random source for the tie-break.

    Returns:
        Number of member entries removed.
    """
    locations: dict[str, list[tuple[int, int]]] = {}
    for group_index, group in enumerate(mapping.groups):
        for member_index, member in enumerate(group.members):
            locations.setdefault(name_key(member), []).append(
                (group_index, member_index)
            )

    to_remove: set[tuple[int, int]] = set()
    for occurrences in locations.values():
        if len(occurrences) < 2:
            continue
        keep_index = rng.randrange(len(occurrences))
        keep_group, keep_member = occurrences[keep_index]
        member_name = mapping.groups[keep_group].members[keep_member]
        logger.warning(
            f"Duplicate practice resolved (practice={member_name!r} "
            f"occurrences={len(occurrences)} "
            f"kept_in={mapping.groups[keep_group].name!r})"
        )
        to_remove.update(
            location for i, location in enumerate(occurrences) if i != keep_index
        )

    for group_index, group in enumerate(mapping.groups):
        group.members = [
            member
            for member_index, member in enumerate(group.members)
            if (group_index, member_index) not in to_remove
        ]
    return len(to_remove)


def find_missing(names: list[str], mapping: GroupMapping) -> list[str]:
    """Return the input names absent from every group.

    Args:
        names: Original item names, in input order.
        mapping: Current mapping.

    Returns:
        Missing names in input order.
    """
    mapped = {name_key(member) for group in mapping.groups for member in group.members}
    return [name for name in names if name_key(name) not in mapped]


def merge_repair_response(mapping: GroupMapping, response: str) -> int:
    """Merge a repair response into the existing groups.

    Groups the LLM invented are ignored. A response that cannot be parsed
    contributes nothing.

    Args:
        mapping: Mapping to extend in place.
        response: Raw repair response.

    Returns:
        Number of members added.
    """
    try:
        repair = parse_mapping_response(response)
    except MalformedResponseError as exc:
        logger.warning(f"Failed to parse repair response, skipping merge (error={exc})")
        return 0

    existing = {name_key(group.name): group for group in mapping.groups}
    added = 0
    for repair_group in repair.groups:
        target = existing.get(name_key(repair_group.name))
        if target is None:
            logger.warning(
                f"Repair response group not in existing mapping, skipping "
                f"(group={repair_group.name!r})"
            )
            continue
        present = {name_key(member) for member in target.members}
        for member in repair_group.members:
            key = name_key(member)
            if key in present:
                continue
            target.members.append(member)
            present.add(key)
            added += 1
    return added


def sort_members(mapping: GroupMapping) -> None:
    """Sort each group's members case-insensitively, in place.

    Args:
        mapping: Mapping to sort.
    """
    for group in mapping.groups:
        group.members.sort(key=lambda member: locale.strxfrm(member.lower()))


class ClusteringController:
    """Group practices with an LLM and repair incomplete answers."""

    def __init__(
        self,
        llm_client: LLMClient,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize controller.

        Args:
            llm_client: Prompt execution backend.
            max_attempts: Validation attempts, including the first answer.
            rng: Random source for duplicate resolution. Seed it for
                reproducible runs.

        Raises:
            ValueError: If ``max_attempts`` is not greater than zero.
        """
        if max_attempts <= 0:
            raise ValueError("max_attempts must be > 0")
        self._llm_client = llm_client
        self._max_attempts = max_attempts
        self._rng = rng or random.Random()

    def run(
        self, items: list[ClusterItem], document: str | None = None
    ) -> ClusteringResult:
        """Produce a complete, duplicate-free grouping of the items.

        Args:
            items: Practices to group.
            document: Prompt document listing the practices. Rendered from
                ``items`` when omitted.

        Returns:
            Clustering result with the validated mapping.

        Raises:
            MalformedResponseError: If the initial response cannot be parsed.
            PromptExecutionError: If an LLM call fails.
        """
        if not items:
            logger.info("clustering_skipped reason=no_items")
            return ClusteringResult(
                mapping=GroupMapping(), attempts=0, repair_rounds=0, duplicates_removed=0
            )

        names: list[str] = []
        known: dict[str, str] = {}
        descriptions: dict[str, str] = {}
        for item in items:
            key = name_key(item.name)
            if key in known:
                logger.warning(
                    f"Practice names collide case-insensitively, keeping first "
                    f"(kept={known[key]!r} ignored={item.name!r})"
                )
                continue
            names.append(item.name)
            known[key] = item.name
            descriptions[key] = item.description

        prompt = build_clustering_prompt(document or render_items_document(items))
        logger.info(
            "clustering_prompt items=%s model=%s prompt_chars=%s",
            len(items),
            self._llm_client.model,
            len(prompt),
        )
        mapping = parse_mapping_response(self._llm_client.execute_prompt(prompt))

        attempts = 0
        repair_rounds = 0
        duplicates_removed = 0
        for attempt in range(1, self._max_attempts + 1):
            attempts = attempt
            discard_unknown_members(mapping, known)
            removed = remove_duplicates_randomly(mapping, self._rng)
            duplicates_removed += removed
            missing = find_missing(names, mapping)
            logger.info(
                "clustering_validation attempt=%s max_attempts=%s duplicates_removed=%s missing=%s",
                attempt,
                self._max_attempts,
                removed,
                len(missing),
            )
            if not missing:
                break
            if attempt == self._max_attempts:
                break

            repair_prompt = build_repair_prompt(missing, mapping.groups, descriptions)
            repair_rounds += 1
            response = self._llm_client.execute_prompt(repair_prompt)
            added = merge_repair_response(mapping, response)
            logger.info(
                "clustering_repair round=%s missing=%s merged=%s",
                repair_rounds,
                len(missing),
                added,
            )

        fallback_members = find_missing(names, mapping)
        if fallback_members:
            logger.warning(
                f"Practices still uncategorized after {attempts} attempts, adding "
                f"fallback group (group={FALLBACK_GROUP_NAME!r} "
                f"count={len(fallback_members)})"
            )
            mapping.groups.append(
                Group(
                    name=FALLBACK_GROUP_NAME,
                    description=FALLBACK_GROUP_DESCRIPTION,
                    members=list(fallback_members),
                )
            )

        sort_members(mapping)
        logger.info(
            "clustering_complete groups=%s members=%s attempts=%s",
            len(mapping.groups),
            mapping.member_count(),
            attempts,
        )
        return ClusteringResult(
            mapping=mapping,
            attempts=attempts,
            repair_rounds=repair_rounds,
            duplicates_removed=duplicates_removed,
            fallback_members=fallback_members,
        )
