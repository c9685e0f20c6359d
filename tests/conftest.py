import sys
from pathlib import Path
from typing import Callable

import pytest


def _add_src_to_path() -> None:
    root = Path(__file__).resolve().parents[1]
    src_path = root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


_add_src_to_path()

from lpi.model import (  # noqa: E402
    DetectionTooling,
    DetectionUnitTest,
    Example,
    FileSnapshot,
    LineRange,
    Practice,
)


def build_snapshot(
    line_count: int = 10, language: str = "kt", path: str = "src/Main.kt", start: int = 1
) -> FileSnapshot:
    return FileSnapshot(
        lines={number: f"line {number}" for number in range(start, start + line_count)},
        language=language,
        path=path,
    )


@pytest.fixture
def make_practice() -> Callable[..., Practice]:
    """Return a builder for practices with sensible defaults."""

    def _make(
        name: str = "Use val over var",
        *,
        description: str = "Prefer immutable references.",
        categories: list[str] | None = None,
        space: str = "space-1",
        examples: list[Example] | None = None,
        unit_tests: list[DetectionUnitTest] | None = None,
        tooling: DetectionTooling | None = None,
        suggestions_disabled: bool | None = None,
        guidelines: str | None = None,
    ) -> Practice:
        return Practice(
            name=name,
            description=description,
            categories=categories if categories is not None else ["Kotlin"],
            space=space,
            examples=examples or [],
            detection_unit_tests=unit_tests or [],
            tooling=tooling,
            suggestions_disabled=suggestions_disabled,
            guidelines=guidelines,
        )

    return _make


@pytest.fixture
def make_example() -> Callable[..., Example]:
    """Return a builder for file examples over a 10 line snapshot."""

    def _make(
        *,
        is_positive: bool = True,
        begin: int = 4,
        end: int = 5,
        language: str = "kt",
        path: str = "src/Main.kt",
        description: str = "",
    ) -> Example:
        return Example(
            snapshot=build_snapshot(language=language, path=path),
            line_range=LineRange(begin=begin, end=end),
            is_positive=is_positive,
            description=description,
        )

    return _make
