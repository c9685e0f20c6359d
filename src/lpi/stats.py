# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Statistics over a practice collection, rendered as Rich tables."""

from collections import Counter
from dataclasses import dataclass

from rich.console import Console
from rich.table import Table

from lpi.model import Practice

NOT_AVAILABLE: str = "N/A"
SUCCESSFUL_TOOLING_STATUSES: frozenset[str] = frozenset({"success", "completed"})


@dataclass(frozen=True)
class PracticeStats:
    """Represent collection level counts."""

    total: int
    with_guidelines: int
    with_successful_tooling: int
    with_suggestions_disabled: int


@dataclass(frozen=True)
class PracticeRow:
    """Represent one line of the practice list."""

    name: str
    categories: str
    code_examples: int
    unit_tests: int
    file_extensions: str
    suggestions_disabled: bool | None
    tooling_status: str


def has_successful_tooling(practice: Practice) -> bool:
    if practice.tooling is None:
        return False
    return practice.tooling.status.lower() in SUCCESSFUL_TOOLING_STATUSES


def file_extensions(practice: Practice) -> list[str]:
    """Return the distinct example file extensions, sorted."""
    extensions = {
        "." + example.snapshot.path.rsplit(".", 1)[-1]
        for example in practice.examples
        if example.snapshot is not None and example.snapshot.path
    }
    return sorted(extensions)


def compute_practice_stats(practices: list[Practice]) -> PracticeStats:
    return PracticeStats(
        total=len(practices),
        with_guidelines=sum(1 for p in practices if p.guidelines is not None),
        with_successful_tooling=sum(1 for p in practices if has_successful_tooling(p)),
        with_suggestions_disabled=sum(
            1 for p in practices if p.suggestions_disabled is True
        ),
    )


def compute_category_stats(practices: list[Practice]) -> list[tuple[str, int]]:
    """Count practices per category.

    Args:
        practices: Legacy practices.

    Returns:
        ``(category, practice_count)`` pairs, most frequent first; ties keep
        first-seen order.
    """
    counts: Counter[str] = Counter()
    for practice in practices:
        counts.update(practice.categories)
    return sorted(counts.items(), key=lambda item: -item[1])


def build_practice_rows(practices: list[Practice]) -> list[PracticeRow]:
    rows: list[PracticeRow] = []
    for practice in practices:
        categories = sorted(practice.categories)
        extensions = file_extensions(practice)
        rows.append(
            PracticeRow(
                name=practice.name,
                categories=", ".join(categories) if categories else NOT_AVAILABLE,
                code_examples=len(practice.examples),
                unit_tests=len(practice.detection_unit_tests),
                file_extensions=", ".join(extensions) if extensions else NOT_AVAILABLE,
                suggestions_disabled=practice.suggestions_disabled,
                tooling_status=(
                    practice.tooling.status
                    if practice.tooling is not None and practice.tooling.status
                    else NOT_AVAILABLE
                ),
            )
        )
    return rows


def render_stats(practices: list[Practice], console: Console) -> None:
    """Print the summary, category and practice tables.

    Args:
        practices: Legacy practices.
        console: Output console.
    """
    stats = compute_practice_stats(practices)
    summary = Table(title="Practice statistics", show_header=True)
    summary.add_column("metric")
    summary.add_column("count", justify="right")
    summary.add_row("practices", str(stats.total))
    summary.add_row("with guidelines", str(stats.with_guidelines))
    summary.add_row("with a successful detection tooling", str(stats.with_successful_tooling))
    summary.add_row("with suggestions disabled", str(stats.with_suggestions_disabled))
    console.print(summary)

    categories = Table(title="Category statistics", show_header=True)
    categories.add_column("category", overflow="fold")
    categories.add_column("practices", justify="right")
    for category, count in compute_category_stats(practices):
        categories.add_row(category, str(count))
    console.print(categories)

    listing = Table(title="Practices", show_header=True, show_lines=True, expand=True)
    listing.add_column("name", ratio=4, overflow="fold")
    listing.add_column("categories", ratio=3, overflow="fold")
    listing.add_column("code examples", ratio=1, justify="right")
    listing.add_column("unit tests", ratio=1, justify="right")
    listing.add_column("file extensions", ratio=2, overflow="fold")
    listing.add_column("suggestions disabled", ratio=1)
    listing.add_column("tooling status", ratio=1)
    for row in build_practice_rows(practices):
        listing.add_row(
            row.name,
            row.categories,
            str(row.code_examples),
            str(row.unit_tests),
            row.file_extensions,
            "" if row.suggestions_disabled is None else str(row.suggestions_disabled),
            row.tooling_status,
        )
    console.print(listing)
