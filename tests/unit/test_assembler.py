# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for standard assembly."""

from typing import Callable

from lpi.assembler import (
    StandardAssembler,
    build_standard_description,
    primary_source_name,
)
from lpi.converter import RecordConverter
from lpi.mapping import Group, GroupMapping
from lpi.model import Practice

SOURCE_NAMES = {"space-1": "Backend", "space-2": "Mobile"}


def _assembler() -> StandardAssembler:
    return StandardAssembler(RecordConverter().convert, SOURCE_NAMES)


def test_ph1_asm_001_groups_practices_in_mapping_order(
    make_practice: Callable[..., Practice],
) -> None:
    practices = [make_practice(f"p{i}", description=f"d{i}") for i in range(1, 6)]
    mapping = GroupMapping(
        groups=[
            Group(name="Testing", members=["P3", " p1 "]),
            Group(name="Style", members=["p2", "p4", "p5"]),
        ]
    )

    output = _assembler().assemble(practices, mapping)

    assert [standard.name for standard in output.standards] == [
        "Backend - Testing",
        "Backend - Style",
    ]
    assert [rule.name for rule in output.standards[0].rules] == ["p3", "p1"]
    assert [rule.name for rule in output.standards[1].rules] == ["p2", "p4", "p5"]


def test_ph1_asm_002_skips_empty_groups_and_collects_unmatched(
    make_practice: Callable[..., Practice],
) -> None:
    practices = [make_practice("p1"), make_practice("p2"), make_practice("orphan")]
    mapping = GroupMapping(
        groups=[
            Group(name="Empty", members=["ghost"]),
            Group(name="Main", members=["p1", "p2"]),
        ]
    )

    output = _assembler().assemble(practices, mapping)

    assert [standard.name for standard in output.standards] == [
        "Backend - Main",
        "Backend - Uncategorized",
    ]
    assert [rule.name for rule in output.standards[1].rules] == ["orphan"]


def test_ph1_asm_003_description_uses_ordinal_heading_and_indent(
    make_practice: Callable[..., Practice],
) -> None:
    practices = [
        make_practice("First", description="line one\nline two"),
        make_practice("Second", description="only"),
    ]

    description = build_standard_description(practices)

    assert description == (
        "## 1. First\n   line one\n   line two\n\n## 2. Second\n   only"
    )


def test_ph1_asm_004_prefix_uses_most_frequent_source_name(
    make_practice: Callable[..., Practice],
) -> None:
    practices = [
        make_practice("a", space="space-2"),
        make_practice("b", space="space-1"),
        make_practice("c", space="space-2"),
    ]

    assert primary_source_name(practices, SOURCE_NAMES) == "Mobile"
    assert primary_source_name([make_practice(space="nope")], SOURCE_NAMES) == (
        "Unknown Space"
    )
    assert primary_source_name([], SOURCE_NAMES) == "Unknown Space"


def test_ph1_asm_005_first_group_wins_for_repeated_member(
    make_practice: Callable[..., Practice],
) -> None:
    practices = [make_practice("p1"), make_practice("p2")]
    mapping = GroupMapping(
        groups=[
            Group(name="A", members=["p1", "p2"]),
            Group(name="B", members=["P1"]),
        ]
    )

    output = _assembler().assemble(practices, mapping)

    assert [standard.name for standard in output.standards] == ["Backend - A"]
    assert [rule.name for rule in output.standards[0].rules] == ["p1", "p2"]


def test_ph1_asm_006_assembly_is_deterministic(
    make_practice: Callable[..., Practice],
) -> None:
    practices = [make_practice(f"p{i}", description=f"d{i}") for i in range(1, 8)]
    mapping = GroupMapping(
        groups=[
            Group(name="One", members=["p4", "p1", "p7"]),
            Group(name="Two", members=["p2", "p3"]),
        ]
    )

    first = _assembler().assemble(practices, mapping).to_dict()
    second = _assembler().assemble(practices, mapping).to_dict()

    assert first == second
    assert first["standards"][-1]["name"] == "Backend - Uncategorized"
