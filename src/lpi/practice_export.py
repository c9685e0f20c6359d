# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""YAML export of practices and the minified document used for clustering."""

import logging
from pathlib import Path
from typing import Any

import yaml

from lpi.context_extractor import DEFAULT_CONTEXT_LINES, extract_code_context
from lpi.converter import UNKNOWN_LANGUAGE, infer_language
from lpi.mapping import dump_yaml
from lpi.model import Practice

logger = logging.getLogger(__name__)

UNIT_TEST_SOURCE: str = "unit_test"
FILE_SOURCE: str = "file_workshop"


class PracticeDocumentError(ValueError):
    """Represent a practice document that is not a list of practice mappings."""


def _practice_entry(practice: Practice, context_lines: int) -> dict[str, Any]:
    """Build the export entry of one practice.

    Args:
        practice: Legacy practice.
        context_lines: Context padding around file example ranges.

    Returns:
        Export entry with examples split by compliance.
    """
    inferred_language = infer_language(practice)
    if inferred_language == UNKNOWN_LANGUAGE and practice.detection_unit_tests:
        logger.warning(
            f"Practice has unit tests but language could not be inferred "
            f"(practice={practice.name!r})"
        )

    positive: list[dict[str, Any]] = []
    negative: list[dict[str, Any]] = []
    for test in practice.detection_unit_tests:
        entry = {
            "source": UNIT_TEST_SOURCE,
            "description": test.description,
            "language": inferred_language,
            "code": test.code,
        }
        (positive if test.is_compliant else negative).append(entry)

    for example in practice.examples:
        snapshot = example.snapshot
        if snapshot is None or snapshot.is_empty():
            continue
        if not snapshot.language:
            logger.warning(
                f"File example has unknown language "
                f"(practice={practice.name!r} path={snapshot.path or 'no path'})"
            )
        entry = {
            "source": FILE_SOURCE,
            "description": example.description,
            "language": snapshot.language or UNKNOWN_LANGUAGE,
            "file_path": snapshot.path,
            "code": extract_code_context(
                snapshot,
                example.line_range.begin,
                example.line_range.end,
                context_lines,
            ),
        }
        (positive if example.is_positive else negative).append(entry)

    result: dict[str, Any] = {
        "name": practice.name,
        "description": practice.description,
        "categories": sorted(practice.categories),
    }
    if practice.tooling is not None and practice.tooling.language:
        result["language"] = practice.tooling.language
    result["positive_examples"] = positive
    result["negative_examples"] = negative
    return result


def export_practices(
    practices: list[Practice], context_lines: int = DEFAULT_CONTEXT_LINES
) -> dict[str, Any]:
    """Build the full practice document.

    Args:
        practices: Legacy practices.
        context_lines: Context padding around file example ranges.

    Returns:
        Document ``{practices: [...]}`` including unit test examples.
    """
    return {
        "practices": [_practice_entry(practice, context_lines) for practice in practices]
    }


def check_practice_entries(practices: list[Any], origin: str = "document") -> None:
    """Ensure every practice entry and example of a document is a mapping.

    Raises:
        PracticeDocumentError: If an entry or one of its example lists is malformed.
    """
    for index, practice in enumerate(practices, start=1):
        if not isinstance(practice, dict):
            raise PracticeDocumentError(
                f"{origin}: practice #{index} must be a mapping, got {type(practice).__name__}"
            )
        for key in ("positive_examples", "negative_examples"):
            examples = practice.get(key) or []
            if not isinstance(examples, list) or not all(
                isinstance(example, dict) for example in examples
            ):
                raise PracticeDocumentError(
                    f"{origin}: practice #{index} has malformed {key}"
                )


def minify_practices(document: dict[str, Any]) -> dict[str, Any]:
    """Drop unit test examples from a practice document.

    Args:
        document: Full practice document.

    Returns:
        Minified document.

    Raises:
        PracticeDocumentError: If the document has no ``practices`` list or
            an entry is malformed.
    """
    practices = document.get("practices") if isinstance(document, dict) else None
    if not isinstance(practices, list):
        raise PracticeDocumentError("Invalid YAML structure: missing practices array")
    check_practice_entries(practices)

    def keep(examples: list[dict[str, Any]] | None) -> list[dict[str, Any]]:
        return [ex for ex in examples or [] if ex.get("source") != UNIT_TEST_SOURCE]

    return {
        "practices": [
            {
                "name": practice.get("name"),
                "description": practice.get("description"),
                "categories": practice.get("categories") or [],
                "positive_examples": keep(practice.get("positive_examples")),
                "negative_examples": keep(practice.get("negative_examples")),
            }
            for practice in practices
        ]
    }


def count_examples(document: dict[str, Any]) -> int:
    """Count the examples of a practice document."""
    return sum(
        len(practice.get("positive_examples") or [])
        + len(practice.get("negative_examples") or [])
        for practice in document.get("practices", [])
    )


def load_practice_document(path: Path) -> dict[str, Any]:
    """Load a practice document written by ``write_practice_document``.

    Args:
        path: YAML file path.

    Returns:
        Decoded document.

    Raises:
        OSError: If the file cannot be read.
        PracticeDocumentError: If the file is not a practice document.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise PracticeDocumentError(f"{path}: {exc}") from exc
    if not isinstance(data, dict) or not isinstance(data.get("practices"), list):
        raise PracticeDocumentError(f"{path}: missing practices array")
    check_practice_entries(data["practices"], str(path))
    return data


def write_practice_document(path: Path, document: dict[str, Any]) -> str:
    """Write a practice document as YAML.

    Args:
        path: Target path.
        document: Practice document.

    Returns:
        The written YAML text.

    Raises:
        OSError: If the file cannot be written.
    """
    text = dump_yaml(document)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return text
