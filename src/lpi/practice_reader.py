# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Reader for newline-delimited JSON practice exports."""

import json
import logging
from pathlib import Path
from typing import Any

from lpi.language import UnknownLanguageError, parse_language
from lpi.model import (
    DetectionTooling,
    DetectionUnitTest,
    Example,
    FileSnapshot,
    LineRange,
    Practice,
)

logger = logging.getLogger(__name__)

REQUIRED_TEXT_FIELDS: tuple[str, ...] = ("name", "description", "space")
REQUIRED_LIST_FIELDS: tuple[str, ...] = ("categories", "examples")


class PracticeParseError(ValueError):
    """Represent a malformed practice record.

    Attributes:
        line_number: 1-based line of the record in its file, when known.
        path: Source file, when known.
    """

    def __init__(
        self, message: str, line_number: int | None = None, path: Path | None = None
    ) -> None:
        location = ""
        if path is not None:
            location = f"{path}:"
        if line_number is not None:
            location = f"{location}{line_number}: "
        elif location:
            location = f"{location} "
        super().__init__(f"{location}{message}")
        self.line_number = line_number
        self.path = path


def parse_practice(text: str) -> Practice:
    """Parse one JSON practice record.

    Args:
        text: JSON object text.

    Returns:
        Parsed practice.

    Raises:
        PracticeParseError: If the JSON is invalid or a required field is missing.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise PracticeParseError(f"Invalid JSON string: {exc}") from exc
    if not isinstance(data, dict):
        raise PracticeParseError("Practice record must be a JSON object")

    for field_name in REQUIRED_TEXT_FIELDS:
        if not data.get(field_name):
            raise PracticeParseError(f"Missing required property: {field_name}")
    for field_name in REQUIRED_LIST_FIELDS:
        if data.get(field_name) is None:
            raise PracticeParseError(f"Missing required property: {field_name}")
    name = data["name"]
    if not isinstance(name, str):
        raise PracticeParseError("Property 'name' must be a string")

    try:
        examples = [_parse_example(raw) for raw in _as_list(data["examples"], "examples")]
        unit_tests = [
            _parse_unit_test(raw)
            for raw in _as_list(data.get("detectionUnitTests") or [], "detectionUnitTests")
        ]
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise PracticeParseError(f"Practice {name!r} is malformed: {exc}") from exc

    tooling = None
    if data.get("toolings"):
        tooling = _parse_tooling(name, data["toolings"])

    guidelines = data.get("guidelines")
    if isinstance(guidelines, dict):
        guidelines = guidelines.get("guidelines")

    suggestions_disabled = data.get("suggestionsDisabled")
    return Practice(
        name=name,
        description=str(data["description"]),
        categories=[str(category) for category in _as_list(data["categories"], "categories")],
        space=str(data["space"]),
        examples=examples,
        detection_unit_tests=unit_tests,
        tooling=tooling,
        suggestions_disabled=(
            None
            if suggestions_disabled is None
            else _as_bool(suggestions_disabled, "suggestionsDisabled")
        ),
        guidelines=guidelines if isinstance(guidelines, str) else None,
    )


def load_practices(path: Path) -> list[Practice]:
    """Load every practice of a JSONL export, stopping at the first bad line.

    Args:
        path: JSONL file path.

    Returns:
        Practices in file order.

    Raises:
        OSError: If the file cannot be read.
        PracticeParseError: If any non-blank line is not a valid practice.
    """
    practices: list[Practice] = []
    lines = path.read_text(encoding="utf-8").split("\n")
    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            practices.append(parse_practice(line))
        except PracticeParseError as exc:
            logger.warning(
                f"Error parsing practice (path={path} line={line_number} error={exc})"
            )
            raise PracticeParseError(str(exc), line_number=line_number, path=path) from exc
    logger.info("practices_loaded path=%s count=%s", path, len(practices))
    return practices


def _as_list(value: Any, field_name: str) -> list[Any]:
    if not isinstance(value, list):
        raise PracticeParseError(f"Property '{field_name}' must be a list")
    return value


def _as_bool(value: Any, field_name: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise PracticeParseError(f"Property '{field_name}' must be a boolean, got {value!r}")
    return value


def _parse_example(raw: dict[str, Any]) -> Example:
    position = raw.get("position") or {}
    line_range = LineRange(
        begin=int(position.get("begin", {}).get("line", 0)),
        end=int(position.get("end", {}).get("line", 0)),
    )
    workshop = raw.get("fileWorkshop")
    snapshot = None
    if isinstance(workshop, dict) and workshop.get("contents") is not None:
        snapshot = FileSnapshot(
            lines={
                int(entry["line"]): str(entry.get("content", ""))
                for entry in workshop["contents"]
            },
            language=str(workshop.get("lang") or ""),
            path=str(workshop.get("path") or ""),
        )
    return Example(
        snapshot=snapshot,
        line_range=line_range,
        is_positive=_as_bool(raw.get("isPositive"), "isPositive"),
        description=str(raw.get("description") or ""),
    )


def _parse_unit_test(raw: dict[str, Any]) -> DetectionUnitTest:
    return DetectionUnitTest(
        code=str(raw["code"]),
        is_compliant=_as_bool(raw.get("isCompliant"), "isCompliant"),
        description=str(raw.get("description") or ""),
    )


def _parse_tooling(practice_name: str, raw: Any) -> DetectionTooling:
    if not isinstance(raw, dict):
        raise PracticeParseError(f"Practice {practice_name!r} has malformed toolings")
    language = raw.get("language")
    if not language:
        raise PracticeParseError(
            f"Practice {practice_name!r} has toolings but missing required "
            f"property: toolings.language"
        )
    try:
        parse_language(str(language))
    except UnknownLanguageError as exc:
        raise PracticeParseError(
            f"Practice {practice_name!r} has invalid toolings.language: "
            f"{language!r}. Must be a valid programming language."
        ) from exc
    return DetectionTooling(
        status=str(raw.get("status") or ""),
        language=str(language),
        program=str(raw.get("program") or ""),
        program_description=str(raw.get("programDescription") or ""),
        source_code_state=str(raw.get("sourceCodeState") or "AST"),
    )
