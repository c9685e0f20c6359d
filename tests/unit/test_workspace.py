# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for workspace layout, mapping files and statistics."""

import io
from pathlib import Path
from typing import Callable

import pytest
from rich.console import Console

from lpi.mapping import (
    Group,
    GroupMapping,
    MalformedMappingError,
    load_group_mapping,
    write_group_mapping,
)
from lpi.model import DetectionTooling, Example, Practice
from lpi.source_api import SourceCollection
from lpi.stats import (
    build_practice_rows,
    compute_category_stats,
    compute_practice_stats,
    render_stats,
)
from lpi.workspace import (
    MAPPING_SUFFIX,
    Workspace,
    WorkspaceError,
    load_spaces,
    slug_from_artifact,
    slug_to_source_id,
    slugify,
    write_spaces,
)


@pytest.mark.parametrize(
    ("name", "slug"),
    [
        ("BforBank-Backend", "bforbank-backend"),
        ("Mobile  App", "mobile-app"),
        ("  Data & ML / Platform!  ", "data-ml-platform"),
        ("Équipe 42", "quipe-42"),
    ],
)
def test_ph3_ws_001_slugify(name: str, slug: str) -> None:
    assert slugify(name) == slug


def test_ph3_ws_002_discovers_artifacts_sorted(tmp_path: Path) -> None:
    for name in ("b.jsonl", "a.jsonl", "a.yaml", "a.minified.yaml", "a.standards-mapping.yaml"):
        (tmp_path / name).write_text("", encoding="utf-8")
    workspace = Workspace(tmp_path)

    assert [p.name for p in workspace.export_files()] == ["a.jsonl", "b.jsonl"]
    assert [p.name for p in workspace.minified_files()] == ["a.minified.yaml"]
    assert [p.name for p in workspace.mapping_files()] == ["a.standards-mapping.yaml"]
    assert Workspace(tmp_path / "missing").export_files() == []
    assert slug_from_artifact(tmp_path / "a.standards-mapping.yaml", MAPPING_SUFFIX) == "a"
    assert slug_from_artifact(tmp_path / ".standards-mapping.yaml", MAPPING_SUFFIX) is None


def test_ph3_ws_003_spaces_round_trip_and_reverse_lookup(tmp_path: Path) -> None:
    path = tmp_path / "spaces.json"
    write_spaces(path, [SourceCollection("s1", "Backend Team"), SourceCollection("s2", "Web")])

    names = load_spaces(path)

    assert names == {"s1": "Backend Team", "s2": "Web"}
    assert slug_to_source_id(names) == {"backend-team": "s1", "web": "s2"}


def test_ph3_ws_004_missing_spaces_file_raises(tmp_path: Path) -> None:
    with pytest.raises(WorkspaceError, match="get-spaces"):
        load_spaces(tmp_path / "spaces.json")


def test_ph3_ws_005_mapping_file_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "x.standards-mapping.yaml"
    mapping = GroupMapping(
        groups=[Group(name="Testing Best Practices", description="Tests", members=["a", "b"])]
    )

    write_group_mapping(path, mapping)

    text = path.read_text(encoding="utf-8")
    assert text.startswith("standards:\n- name: Testing Best Practices\n")
    assert load_group_mapping(path) == mapping


def test_ph3_ws_006_malformed_mapping_file_raises(tmp_path: Path) -> None:
    path = tmp_path / "x.standards-mapping.yaml"
    path.write_text("standards:\n  - description: no name\n", encoding="utf-8")

    with pytest.raises(MalformedMappingError, match="no name"):
        load_group_mapping(path)


def test_ph3_stats_001_counts_and_rows(
    make_practice: Callable[..., Practice],
    make_example: Callable[..., Example],
) -> None:
    practices = [
        make_practice(
            "a",
            categories=["Style", "Kotlin"],
            examples=[make_example(path="x/A.kt"), make_example(path="y/B.java")],
            tooling=DetectionTooling(status="SUCCESS", language="KOTLIN"),
            guidelines="g",
        ),
        make_practice(
            "b",
            categories=["Kotlin"],
            tooling=DetectionTooling(status="Completed", language="KOTLIN"),
            suggestions_disabled=True,
        ),
        make_practice("c", categories=[]),
    ]

    stats = compute_practice_stats(practices)
    rows = build_practice_rows(practices)

    assert (stats.total, stats.with_guidelines) == (3, 1)
    assert stats.with_successful_tooling == 2
    assert stats.with_suggestions_disabled == 1
    assert compute_category_stats(practices) == [("Kotlin", 2), ("Style", 1)]
    assert rows[0].categories == "Kotlin, Style"
    assert rows[0].file_extensions == ".java, .kt"
    assert rows[2].categories == "N/A"
    assert rows[2].tooling_status == "N/A"


def test_ph3_stats_002_render_prints_tables(
    make_practice: Callable[..., Practice],
) -> None:
    stdout = io.StringIO()
    console = Console(file=stdout, force_terminal=False, width=200)

    render_stats([make_practice("Use val over var")], console)

    output = stdout.getvalue()
    assert "Practice statistics" in output
    assert "Category statistics" in output
    assert "Use val over var" in output
