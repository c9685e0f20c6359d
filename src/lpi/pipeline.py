# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Workspace pipeline steps with per-collection failure isolation."""

import json
import logging
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from lpi.assembler import StandardAssembler
from lpi.clustering import (
    DEFAULT_MAX_ATTEMPTS,
    ClusterItem,
    ClusteringController,
    ClusteringResult,
)
from lpi.context_extractor import DEFAULT_CONTEXT_LINES
from lpi.converter import RecordConverter
from lpi.llm_client import LLMClient, PromptExecutionError
from lpi.mapping import MalformedMappingError, load_group_mapping, write_group_mapping
from lpi.model import Practice, ValidationOutput
from lpi.practice_export import (
    PracticeDocumentError,
    count_examples,
    export_practices,
    load_practice_document,
    minify_practices,
    write_practice_document,
)
from lpi.practice_reader import load_practices
from lpi.source_api import SourceCatalogClient, SourceCollection
from lpi.target_api import TargetImportClient, TargetImportError
from lpi.workspace import (
    MAPPING_SUFFIX,
    MINIFIED_SUFFIX,
    VALIDATION_SUFFIX,
    Workspace,
    WorkspaceError,
    load_spaces,
    slug_from_artifact,
    slug_to_source_id,
    slugify,
    write_spaces,
)

logger = logging.getLogger(__name__)

STATUS_SUCCEEDED: str = "succeeded"
STATUS_FAILED: str = "failed"
STATUS_SKIPPED: str = "skipped"


@dataclass
class CollectionOutcome:
    """Represent the result of one step for one collection."""

    slug: str
    status: str
    message: str = ""
    counts: dict[str, int] = field(default_factory=dict)


@dataclass
class StepSummary:
    """Aggregate the per-collection outcomes of one step."""

    step: str
    outcomes: list[CollectionOutcome] = field(default_factory=list)

    def _count(self, status: str) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @property
    def succeeded(self) -> int:
        return self._count(STATUS_SUCCEEDED)

    @property
    def failed(self) -> int:
        return self._count(STATUS_FAILED)

    @property
    def skipped(self) -> int:
        return self._count(STATUS_SKIPPED)

    def total(self, name: str) -> int:
        """Sum one count over all collections."""
        return sum(outcome.counts.get(name, 0) for outcome in self.outcomes)

    def add(self, outcome: CollectionOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.status == STATUS_FAILED:
            logger.warning(
                f"Collection failed (step={self.step} slug={outcome.slug} "
                f"error={outcome.message})"
            )
        elif outcome.status == STATUS_SKIPPED:
            logger.warning(
                f"Collection skipped (step={self.step} slug={outcome.slug} "
                f"reason={outcome.message})"
            )
        else:
            logger.info(
                "collection_done step=%s slug=%s counts=%s",
                self.step,
                outcome.slug,
                outcome.counts,
            )


def fetch_source_collections(
    workspace: Workspace, client: SourceCatalogClient
) -> list[SourceCollection]:
    """Fetch the source catalog and write ``spaces.json``.

    Args:
        workspace: Workspace layout.
        client: Source catalog client.

    Returns:
        Fetched collections.

    Raises:
        SourceApiError: If the catalog request fails.
        OSError: If ``spaces.json`` cannot be written.
    """
    collections = client.get_collections()
    write_spaces(workspace.spaces_path, collections)
    logger.info(
        "source_collections_fetched count=%s path=%s",
        len(collections),
        workspace.spaces_path,
    )
    return collections


def export_collection(
    input_path: Path,
    output_path: Path,
    minified_path: Path,
    context_lines: int = DEFAULT_CONTEXT_LINES,
    practices: list[Practice] | None = None,
) -> dict[str, int]:
    """Export one collection to its full and minified practice documents.

    Args:
        input_path: JSONL export.
        output_path: Full practice document path.
        minified_path: Minified practice document path.
        context_lines: Context padding around file example ranges.
        practices: Already loaded practices of ``input_path``.

    Returns:
        Practice and example counts.

    Raises:
        PracticeParseError: If the export holds a malformed record.
        OSError: If a file cannot be read or written.
    """
    if practices is None:
        practices = load_practices(input_path)
    document = export_practices(practices, context_lines)
    write_practice_document(output_path, document)
    minified = minify_practices(document)
    write_practice_document(minified_path, minified)
    return {
        "practices": len(practices),
        "examples": count_examples(document),
        "minified_examples": count_examples(minified),
    }


def init_workspace(
    workspace: Workspace, context_lines: int = DEFAULT_CONTEXT_LINES
) -> StepSummary:
    """Export every collection of the workspace.

    Args:
        workspace: Workspace layout.
        context_lines: Context padding around file example ranges.

    Returns:
        Step summary; collections without practices or catalog entry are skipped.

    Raises:
        WorkspaceError: If ``spaces.json`` or the exports are missing.
        PracticeParseError: If an export holds a malformed record.
    """
    source_names = load_spaces(workspace.spaces_path)
    export_files = workspace.export_files()
    if not export_files:
        raise WorkspaceError(
            f"No .jsonl files found in {workspace.root}. Place the collection "
            f"exports there and try again."
        )
    logger.info("init_started exports=%s", len(export_files))

    summary = StepSummary(step="init")
    for export_path in export_files:
        practices = load_practices(export_path)
        if not practices:
            summary.add(
                CollectionOutcome(export_path.name, STATUS_SKIPPED, "no practices")
            )
            continue
        source_id = practices[0].space
        source_name = source_names.get(source_id)
        if source_name is None:
            summary.add(
                CollectionOutcome(
                    export_path.name,
                    STATUS_SKIPPED,
                    f"unknown source collection id {source_id!r}",
                )
            )
            continue
        slug = slugify(source_name)
        try:
            counts = export_collection(
                export_path,
                workspace.practices_path(slug),
                workspace.minified_path(slug),
                context_lines,
                practices=practices,
            )
        except OSError as exc:
            summary.add(CollectionOutcome(slug, STATUS_FAILED, str(exc)))
            continue
        summary.add(CollectionOutcome(slug, STATUS_SUCCEEDED, counts=counts))
    return summary


def cluster_items_from_document(document: dict[str, Any]) -> list[ClusterItem]:
    """Build clustering items from a practice document."""
    return [
        ClusterItem(
            name=str(practice.get("name") or ""),
            description=str(practice.get("description") or ""),
            categories=tuple(str(c) for c in practice.get("categories") or []),
        )
        for practice in document["practices"]
        if practice.get("name")
    ]


def map_collection(
    workspace: Workspace,
    slug: str,
    controller: ClusteringController,
) -> ClusteringResult:
    """Cluster one collection and write its group mapping.

    Args:
        workspace: Workspace layout.
        slug: Collection slug.
        controller: Clustering controller.

    Returns:
        Clustering result.

    Raises:
        WorkspaceError: If the full practice document is missing.
        PracticeDocumentError: If a practice document is malformed.
        MalformedResponseError: If the initial LLM response cannot be parsed.
        PromptExecutionError: If an LLM call fails.
        OSError: If a file cannot be read or written.
    """
    practices_path = workspace.practices_path(slug)
    if not practices_path.exists():
        raise WorkspaceError(f"{practices_path.name} not found (required for mapping)")
    minified = minify_practices(load_practice_document(practices_path))
    document_text = write_practice_document(workspace.minified_path(slug), minified)
    result = controller.run(cluster_items_from_document(minified), document_text)
    write_group_mapping(workspace.mapping_path(slug), result.mapping)
    return result


def map_workspace(
    workspace: Workspace,
    llm_client: LLMClient,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    rng: random.Random | None = None,
) -> StepSummary:
    """Cluster every minified collection of the workspace.

    Args:
        workspace: Workspace layout.
        llm_client: Prompt execution backend.
        max_attempts: Validation attempts per collection.
        rng: Random source for duplicate resolution.

    Returns:
        Step summary; a failing collection does not stop the others.

    Raises:
        WorkspaceError: If no minified documents exist.
    """
    minified_files = workspace.minified_files()
    if not minified_files:
        raise WorkspaceError(f"No .minified.yaml files found in {workspace.root}.")
    controller = ClusteringController(llm_client, max_attempts=max_attempts, rng=rng)
    logger.info(
        "map_started collections=%s model=%s", len(minified_files), llm_client.model
    )

    summary = StepSummary(step="map")
    for minified_path in minified_files:
        slug = slug_from_artifact(minified_path, MINIFIED_SUFFIX)
        if slug is None:
            summary.add(
                CollectionOutcome(minified_path.name, STATUS_SKIPPED, "no slug in name")
            )
            continue
        try:
            result = map_collection(workspace, slug, controller)
        except (
            WorkspaceError,
            PracticeDocumentError,
            MalformedMappingError,
            PromptExecutionError,
            OSError,
        ) as exc:
            summary.add(CollectionOutcome(slug, STATUS_FAILED, str(exc)))
            continue
        summary.add(
            CollectionOutcome(
                slug,
                STATUS_SUCCEEDED,
                counts={
                    "groups": len(result.mapping.groups),
                    "members": result.mapping.member_count(),
                    "attempts": result.attempts,
                    "repair_rounds": result.repair_rounds,
                    "duplicates_removed": result.duplicates_removed,
                    "fallback_members": len(result.fallback_members),
                },
            )
        )
    return summary


def validation_counts(output: ValidationOutput) -> dict[str, int]:
    """Count standards, rules, detection programs and examples of a document."""
    rules = [rule for standard in output.standards for rule in standard.rules]
    return {
        "standards": len(output.standards),
        "rules": len(rules),
        "rules_with_detection": sum(1 for rule in rules if rule.detection_program),
        "positive_examples": sum(len(rule.positive_examples) for rule in rules),
        "negative_examples": sum(len(rule.negative_examples) for rule in rules),
    }


def write_validation_document(path: Path, output: ValidationOutput) -> None:
    """Write a validation document as indented JSON.

    Raises:
        OSError: If the file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(output.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8"
    )


def validate_workspace(
    workspace: Workspace, context_lines: int = DEFAULT_CONTEXT_LINES
) -> StepSummary:
    """Assemble the validation document of every mapped collection.

    Args:
        workspace: Workspace layout.
        context_lines: Context padding around file example ranges.

    Returns:
        Step summary with standards, rules and example counts.

    Raises:
        WorkspaceError: If ``spaces.json``, the exports or the mappings are missing.
        PracticeParseError: If an export holds a malformed record.
    """
    source_names = load_spaces(workspace.spaces_path)
    source_ids = slug_to_source_id(source_names)

    export_files = workspace.export_files()
    if not export_files:
        raise WorkspaceError(f"No .jsonl files found in {workspace.root}.")
    practices: list[Practice] = []
    for export_path in export_files:
        practices.extend(load_practices(export_path))
    logger.info(
        "validate_started exports=%s practices=%s", len(export_files), len(practices)
    )

    mapping_files = workspace.mapping_files()
    if not mapping_files:
        raise WorkspaceError(
            f"No .standards-mapping.yaml files found in {workspace.root}. Run map first."
        )

    converter = RecordConverter(context_lines=context_lines)
    assembler = StandardAssembler(converter.convert, source_names)
    summary = StepSummary(step="validate")
    for mapping_path in mapping_files:
        slug = slug_from_artifact(mapping_path, MAPPING_SUFFIX)
        if slug is None:
            summary.add(
                CollectionOutcome(mapping_path.name, STATUS_SKIPPED, "no slug in name")
            )
            continue
        source_id = source_ids.get(slug)
        if source_id is None:
            summary.add(
                CollectionOutcome(
                    slug, STATUS_SKIPPED, "no matching source collection in spaces.json"
                )
            )
            continue
        collection = [practice for practice in practices if practice.space == source_id]
        if not collection:
            summary.add(
                CollectionOutcome(
                    slug, STATUS_SKIPPED, f"no practices for source collection {source_id}"
                )
            )
            continue
        try:
            mapping = load_group_mapping(mapping_path)
            output = assembler.assemble(collection, mapping)
            write_validation_document(workspace.validation_path(slug), output)
        except (MalformedMappingError, OSError) as exc:
            summary.add(CollectionOutcome(slug, STATUS_FAILED, str(exc)))
            continue
        summary.add(
            CollectionOutcome(slug, STATUS_SUCCEEDED, counts=validation_counts(output))
        )
    return summary


def import_collection(path: Path, client: TargetImportClient) -> tuple[int, int]:
    """Import the standards of one validation document one at a time.

    Args:
        path: Validation document.
        client: Target import client.

    Returns:
        ``(imported, failed)`` standard counts.

    Raises:
        OSError: If the document cannot be read.
        ValueError: If the document is not valid JSON or has no standards list.
    """
    document = json.loads(path.read_text(encoding="utf-8"))
    standards = document.get("standards") if isinstance(document, dict) else None
    if not isinstance(standards, list):
        raise ValueError(f"{path.name}: missing standards array")

    imported = 0
    failed = 0
    for standard in standards:
        name = standard.get("name") if isinstance(standard, dict) else None
        try:
            client.import_payload({"standards": [standard]})
        except TargetImportError as exc:
            failed += 1
            logger.warning(
                f"Standard import failed (standard={name!r} "
                f"status={exc.status_code} error={exc})"
            )
            continue
        imported += 1
        logger.info("standard_imported name=%s", name)
    return imported, failed


def import_workspace(workspace: Workspace, client: TargetImportClient) -> StepSummary:
    """Import every validation document of the workspace.

    Args:
        workspace: Workspace layout.
        client: Target import client.

    Returns:
        Step summary; a collection succeeds only when all its standards import.

    Raises:
        WorkspaceError: If no validation documents exist.
    """
    validation_files = workspace.validation_files()
    if not validation_files:
        raise WorkspaceError(
            f"No .standards-validation.json files found in {workspace.root}. "
            f"Run validate first."
        )
    summary = StepSummary(step="import")
    for path in validation_files:
        slug = slug_from_artifact(path, VALIDATION_SUFFIX) or path.name
        try:
            imported, failed = import_collection(path, client)
        except (OSError, ValueError) as exc:
            summary.add(CollectionOutcome(slug, STATUS_FAILED, str(exc)))
            continue
        counts = {"imported": imported, "failed": failed}
        if failed:
            summary.add(
                CollectionOutcome(
                    slug, STATUS_FAILED, f"{failed} standard(s) rejected", counts=counts
                )
            )
        else:
            summary.add(CollectionOutcome(slug, STATUS_SUCCEEDED, counts=counts))
    return summary
