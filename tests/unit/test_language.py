# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the programming language registry."""

import pytest

from lpi.language import (
    CommentStyle,
    ProgrammingLanguage,
    UnknownLanguageError,
    comment_style_for,
    parse_language,
    resolve_language,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("kt", ProgrammingLanguage.KOTLIN),
        ("KT", ProgrammingLanguage.KOTLIN),
        (" py ", ProgrammingLanguage.PYTHON),
        ("TypeScript", ProgrammingLanguage.TYPESCRIPT),
        ("c#", ProgrammingLanguage.CSHARP),
        ("JAVASCRIPT_JSX", ProgrammingLanguage.JAVASCRIPT_JSX),
        ("hdbview", ProgrammingLanguage.SAP_HANA_SQL),
        ("avsc", ProgrammingLanguage.AVRO),
    ],
)
def test_ph1_lang_001_resolve_language_matches_id_name_and_extension(
    value: str, expected: ProgrammingLanguage
) -> None:
    assert resolve_language(value) == expected


def test_ph1_lang_002_legacy_typescript_jsx_alias_maps_to_tsx() -> None:
    assert resolve_language("typescript_jsx") == ProgrammingLanguage.TYPESCRIPT_TSX
    assert parse_language("TYPESCRIPT_JSX") == ProgrammingLanguage.TYPESCRIPT_TSX


@pytest.mark.parametrize("value", ["unknown", "zzz", "1234", "?"])
def test_ph1_lang_003_resolve_language_falls_back_to_generic(value: str) -> None:
    assert resolve_language(value) == ProgrammingLanguage.GENERIC


@pytest.mark.parametrize("value", ["", "   ", "\t"])
def test_ph1_lang_004_resolve_language_rejects_empty_input(value: str) -> None:
    with pytest.raises(UnknownLanguageError):
        resolve_language(value)


def test_ph1_lang_005_parse_language_rejects_unknown_identifier() -> None:
    assert parse_language("kotlin") == ProgrammingLanguage.KOTLIN

    with pytest.raises(UnknownLanguageError, match="Unknown programming language"):
        parse_language("brainfuck")


def test_ph1_lang_006_comment_styles_cover_prefix_suffix_and_none() -> None:
    assert comment_style_for(ProgrammingLanguage.PYTHON) == CommentStyle("#")
    assert comment_style_for(ProgrammingLanguage.SQL) == CommentStyle("--")
    assert comment_style_for(ProgrammingLanguage.HTML) == CommentStyle("<!--", "-->")
    assert comment_style_for(ProgrammingLanguage.SAP_ABAP) == CommentStyle("*")
    assert comment_style_for(ProgrammingLanguage.JSON) is None
    assert comment_style_for(ProgrammingLanguage.KOTLIN) == CommentStyle("//")
    assert comment_style_for(ProgrammingLanguage.GENERIC) == CommentStyle("//")
