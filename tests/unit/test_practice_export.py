# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the practice YAML export and minification."""

from pathlib import Path
from typing import Callable

import pytest
import yaml

from lpi.clustering import count_items
from lpi.mapping import dump_yaml
from lpi.model import DetectionTooling, DetectionUnitTest, Example, Practice
from lpi.practice_export import (
    PracticeDocumentError,
    count_examples,
    export_practices,
    load_practice_document,
    minify_practices,
    write_practice_document,
)


def _practice(
    make_practice: Callable[..., Practice], make_example: Callable[..., Example]
) -> Practice:
    return make_practice(
        "Use val",
        categories=["Style", "Kotlin"],
        examples=[make_example(is_positive=True), make_example(is_positive=False)],
        unit_tests=[
            DetectionUnitTest(code="val a = 1", is_compliant=True),
            DetectionUnitTest(code="var a = 1", is_compliant=False),
        ],
        tooling=DetectionTooling(status="FAILURE", language="KOTLIN"),
    )


def test_ph1_exp_001_export_splits_examples_by_compliance(
    make_practice: Callable[..., Practice], make_example: Callable[..., Example]
) -> None:
    document = export_practices([_practice(make_practice, make_example)], 2)

    entry = document["practices"][0]
    assert entry["categories"] == ["Kotlin", "Style"]
    assert entry["language"] == "KOTLIN"
    assert [ex["source"] for ex in entry["positive_examples"]] == [
        "unit_test",
        "file_workshop",
    ]
    assert entry["positive_examples"][0]["language"] == "kt"
    assert entry["positive_examples"][1]["file_path"] == "src/Main.kt"
    assert entry["positive_examples"][1]["code"].startswith("line 2\n")
    assert count_examples(document) == 4


def test_ph1_exp_002_minify_drops_unit_tests(
    make_practice: Callable[..., Practice], make_example: Callable[..., Example]
) -> None:
    document = export_practices([_practice(make_practice, make_example)], 2)

    minified = minify_practices(document)

    entry = minified["practices"][0]
    assert set(entry) == {
        "name",
        "description",
        "categories",
        "positive_examples",
        "negative_examples",
    }
    assert all(ex["source"] == "file_workshop" for ex in entry["positive_examples"])
    assert count_examples(minified) == 2


def test_ph1_exp_003_minify_rejects_document_without_practices() -> None:
    with pytest.raises(PracticeDocumentError):
        minify_practices({"items": []})


def test_ph1_exp_004_written_document_round_trips_and_counts_names(
    tmp_path: Path,
    make_practice: Callable[..., Practice],
    make_example: Callable[..., Example],
) -> None:
    practices = [
        make_practice("first", examples=[make_example()]),
        make_practice("second: with colon"),
    ]
    path = tmp_path / "out" / "space.minified.yaml"

    text = write_practice_document(path, minify_practices(export_practices(practices)))

    assert count_items(text) == 2
    loaded = load_practice_document(path)
    assert [p["name"] for p in loaded["practices"]] == ["first", "second: with colon"]


def test_ph1_exp_005_long_lines_are_not_wrapped() -> None:
    text = dump_yaml({"description": "word " * 80})

    assert len(text.strip().split("\n")) == 1
    assert yaml.safe_load(text)["description"] == "word " * 80


def test_ph1_exp_006_load_rejects_non_practice_yaml(tmp_path: Path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("standards: []\n", encoding="utf-8")

    with pytest.raises(PracticeDocumentError):
        load_practice_document(path)


def test_ph1_exp_007_rejects_entries_that_are_not_mappings(tmp_path: Path) -> None:
    path = tmp_path / "space.yaml"
    path.write_text("practices:\n  - just a string\n", encoding="utf-8")

    with pytest.raises(PracticeDocumentError, match="practice #1 must be a mapping"):
        load_practice_document(path)
    with pytest.raises(PracticeDocumentError, match="malformed positive_examples"):
        minify_practices({"practices": [{"name": "a", "positive_examples": ["code"]}]})
