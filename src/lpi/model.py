# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Domain models for legacy practices and migrated standards."""

from dataclasses import dataclass, field
from typing import Any, Literal

DetectionMode = Literal["AST", "RAW"]

SUCCESS_STATUS: str = "SUCCESS"


def name_key(name: str) -> str:
    """Canonicalize a practice or group name for use as a join key.

    Args:
        name: Raw name as written in a record, a mapping or an LLM response.

    Returns:
        Trimmed, lower-cased key.
    """
    return name.strip().lower()


@dataclass(frozen=True)
class LineRange:
    """Represent an inclusive range of source line numbers."""

    begin: int
    end: int


@dataclass(frozen=True)
class FileSnapshot:
    """Represent one source file captured at export time.

    Attributes:
        lines: Line number to line content. Numbers need not be contiguous or
            start at 1.
        language: Language tag recorded by the legacy system (usually an
            extension such as ``kt``).
        path: File path recorded by the legacy system.
    """

    lines: dict[int, str]
    language: str = ""
    path: str = ""

    @property
    def min_line(self) -> int:
        """Return the smallest line number held by the snapshot."""
        return min(self.lines)

    @property
    def max_line(self) -> int:
        """Return the largest line number held by the snapshot."""
        return max(self.lines)

    def is_empty(self) -> bool:
        """Return whether the snapshot holds no lines."""
        return not self.lines


@dataclass(frozen=True)
class Example:
    """Represent a highlighted file excerpt demonstrating a practice.

    Attributes:
        snapshot: Source file the excerpt points into; ``None`` when the
            export carries no file.
        line_range: Highlighted lines.
        is_positive: Whether the excerpt complies with the practice.
        description: Free-text comment attached to the example.
    """

    snapshot: FileSnapshot | None
    line_range: LineRange
    is_positive: bool
    description: str = ""


@dataclass(frozen=True)
class DetectionUnitTest:
    """Represent one detection unit test."""

    code: str
    is_compliant: bool
    description: str = ""


@dataclass(frozen=True)
class DetectionTooling:
    """Represent the automated detector attached to a practice.

    Attributes:
        status: Generation status; only ``SUCCESS`` makes it eligible.
        language: Target language identifier declared by the tooling.
        program: Detection program source.
        program_description: Human description of the program.
        source_code_state: Input the program works on (``AST`` or ``RAW``).
    """

    status: str
    language: str
    program: str = ""
    program_description: str = ""
    source_code_state: str = "AST"


@dataclass(frozen=True)
class Practice:
    """Represent one legacy practice record.

    Attributes:
        name: Unique name; the join key across the pipeline.
        description: Free-text description.
        categories: Category labels.
        space: Opaque identifier of the source collection.
        examples: File-derived examples.
        detection_unit_tests: Unit tests of the detection program.
        tooling: Automated detection metadata.
        suggestions_disabled: Legacy flag disabling detection suggestions.
        guidelines: Optional implementation guidelines text.
    """

    name: str
    description: str
    categories: list[str]
    space: str
    examples: list[Example] = field(default_factory=list)
    detection_unit_tests: list[DetectionUnitTest] = field(default_factory=list)
    tooling: DetectionTooling | None = None
    suggestions_disabled: bool | None = None
    guidelines: str | None = None


@dataclass(frozen=True)
class ValidatedExample:
    """Represent one code example of a migrated rule."""

    code: str
    language: str

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the validation document shape."""
        return {"code": self.code, "language": self.language}


@dataclass(frozen=True)
class DetectionProgram:
    """Represent the detection program of a migrated rule."""

    code: str
    description: str
    language: str
    mode: DetectionMode = "AST"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the validation document shape."""
        return {
            "code": self.code,
            "description": self.description,
            "language": self.language,
            "mode": self.mode,
        }


@dataclass(frozen=True)
class ValidatedRule:
    """Represent one migrated rule (one practice)."""

    name: str
    positive_examples: list[ValidatedExample]
    negative_examples: list[ValidatedExample]
    detection_program: DetectionProgram | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the validation document shape."""
        payload: dict[str, Any] = {
            "name": self.name,
            "positiveExamples": [ex.to_dict() for ex in self.positive_examples],
            "negativeExamples": [ex.to_dict() for ex in self.negative_examples],
        }
        if self.detection_program is not None:
            payload["detectionProgram"] = self.detection_program.to_dict()
        return payload


@dataclass(frozen=True)
class ValidatedStandard:
    """Represent one migrated standard (one group of practices)."""

    name: str
    description: str
    rules: list[ValidatedRule]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the validation document shape."""
        return {
            "name": self.name,
            "description": self.description,
            "rules": [rule.to_dict() for rule in self.rules],
        }


@dataclass(frozen=True)
class ValidationOutput:
    """Represent the complete validation document of one collection."""

    standards: list[ValidatedStandard]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the validation document shape."""
        return {"standards": [standard.to_dict() for standard in self.standards]}
