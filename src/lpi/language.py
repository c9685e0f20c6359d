# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Programming language registry: identifiers, extensions and comment syntax."""

import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class UnknownLanguageError(ValueError):
    """Represent a language input that cannot be resolved."""


class ProgrammingLanguage(str, Enum):
    """Language identifiers understood by the target system."""

    GENERIC = "GENERIC"
    JAVASCRIPT = "JAVASCRIPT"
    JAVASCRIPT_JSX = "JAVASCRIPT_JSX"
    TYPESCRIPT = "TYPESCRIPT"
    TYPESCRIPT_TSX = "TYPESCRIPT_TSX"
    PYTHON = "PYTHON"
    PHP = "PHP"
    JAVA = "JAVA"
    SCSS = "SCSS"
    HTML = "HTML"
    CSHARP = "CSHARP"
    GO = "GO"
    C = "C"
    CPP = "CPP"
    SQL = "SQL"
    KOTLIN = "KOTLIN"
    VUE = "VUE"
    CSS = "CSS"
    YAML = "YAML"
    JSON = "JSON"
    XML = "XML"
    BASH = "BASH"
    MARKDOWN = "MARKDOWN"
    RUBY = "RUBY"
    RUST = "RUST"
    SAP_ABAP = "SAP_ABAP"
    SAP_CDS = "SAP_CDS"
    SAP_HANA_SQL = "SAP_HANA_SQL"
    SWIFT = "SWIFT"
    PROPERTIES = "PROPERTIES"
    AVRO = "AVRO"


@dataclass(frozen=True)
class LanguageInfo:
    """Describe one language entry.

    Attributes:
        display_name: Human-readable name.
        file_extensions: Extensions without the leading dot.
    """

    display_name: str
    file_extensions: tuple[str, ...]


@dataclass(frozen=True)
class CommentStyle:
    """Describe line comment syntax.

    Attributes:
        prefix: Token opening a comment (``//``, ``#``, ``<!--``).
        suffix: Token closing a comment for block-style syntaxes.
    """

    prefix: str
    suffix: str | None = None


LANGUAGE_DETAILS: dict[ProgrammingLanguage, LanguageInfo] = {
    ProgrammingLanguage.GENERIC: LanguageInfo("Generic", ()),
    ProgrammingLanguage.JAVASCRIPT: LanguageInfo("JavaScript", ("js",)),
    ProgrammingLanguage.JAVASCRIPT_JSX: LanguageInfo("JavaScript (JSX)", ("jsx",)),
    ProgrammingLanguage.TYPESCRIPT: LanguageInfo("TypeScript", ("ts",)),
    ProgrammingLanguage.TYPESCRIPT_TSX: LanguageInfo("TypeScript (TSX)", ("tsx",)),
    ProgrammingLanguage.PYTHON: LanguageInfo("Python", ("py", "pyx", "pyw")),
    ProgrammingLanguage.PHP: LanguageInfo("PHP", ("php", "phtml")),
    ProgrammingLanguage.JAVA: LanguageInfo("Java", ("java",)),
    ProgrammingLanguage.SCSS: LanguageInfo("SCSS", ("scss",)),
    ProgrammingLanguage.HTML: LanguageInfo("HTML", ("html", "htm")),
    ProgrammingLanguage.CSHARP: LanguageInfo("C#", ("cs",)),
    ProgrammingLanguage.GO: LanguageInfo("Go", ("go",)),
    ProgrammingLanguage.C: LanguageInfo("C", ("c", "h")),
    ProgrammingLanguage.CPP: LanguageInfo(
        "C++", ("cpp", "cc", "cxx", "c++", "hpp", "hxx")
    ),
    ProgrammingLanguage.SQL: LanguageInfo("SQL", ("sql",)),
    ProgrammingLanguage.KOTLIN: LanguageInfo("Kotlin", ("kt", "kts")),
    ProgrammingLanguage.VUE: LanguageInfo("Vue", ("vue",)),
    ProgrammingLanguage.CSS: LanguageInfo("CSS", ("css",)),
    ProgrammingLanguage.YAML: LanguageInfo("YAML", ("yaml", "yml")),
    ProgrammingLanguage.JSON: LanguageInfo("JSON", ("json",)),
    ProgrammingLanguage.XML: LanguageInfo("XML", ("xml",)),
    ProgrammingLanguage.BASH: LanguageInfo("Bash", ("sh", "bash")),
    ProgrammingLanguage.MARKDOWN: LanguageInfo("Markdown", ("md",)),
    ProgrammingLanguage.RUBY: LanguageInfo("Ruby", ("rb",)),
    ProgrammingLanguage.RUST: LanguageInfo("Rust", ("rs",)),
    ProgrammingLanguage.SAP_ABAP: LanguageInfo("SAP ABAP", ("abap", "ab4")),
    ProgrammingLanguage.SAP_CDS: LanguageInfo("SAP CDS", ("cds",)),
    ProgrammingLanguage.SAP_HANA_SQL: LanguageInfo(
        "SAP HANA SQL",
        ("hdbprocedure", "hdbfunction", "hdbview", "hdbcalculationview"),
    ),
    ProgrammingLanguage.SWIFT: LanguageInfo("Swift", ("swift",)),
    ProgrammingLanguage.PROPERTIES: LanguageInfo("Properties", ("properties",)),
    ProgrammingLanguage.AVRO: LanguageInfo("Avro", ("avdl", "avsc", "avpr")),
}

# Legacy identifiers that were renamed in the target system.
LANGUAGE_ALIASES: dict[str, ProgrammingLanguage] = {
    "TYPESCRIPT_JSX": ProgrammingLanguage.TYPESCRIPT_TSX,
}

_SLASH_SLASH = CommentStyle(prefix="//")
_HASH = CommentStyle(prefix="#")
_DOUBLE_DASH = CommentStyle(prefix="--")
_MARKUP = CommentStyle(prefix="<!--", suffix="-->")
_ASTERISK = CommentStyle(prefix="*")

COMMENT_STYLES: dict[ProgrammingLanguage, CommentStyle | None] = {
    ProgrammingLanguage.PYTHON: _HASH,
    ProgrammingLanguage.YAML: _HASH,
    ProgrammingLanguage.BASH: _HASH,
    ProgrammingLanguage.RUBY: _HASH,
    ProgrammingLanguage.PROPERTIES: _HASH,
    ProgrammingLanguage.SQL: _DOUBLE_DASH,
    ProgrammingLanguage.SAP_HANA_SQL: _DOUBLE_DASH,
    ProgrammingLanguage.HTML: _MARKUP,
    ProgrammingLanguage.XML: _MARKUP,
    ProgrammingLanguage.MARKDOWN: _MARKUP,
    ProgrammingLanguage.SAP_ABAP: _ASTERISK,
    ProgrammingLanguage.JSON: None,
}


def _lookup(value: str) -> ProgrammingLanguage | None:
    """Run the alias, identifier, display name and extension lookups in order.

    Args:
        value: Non-empty trimmed input.

    Returns:
        Matching language, or ``None`` when nothing matches.
    """
    alias = LANGUAGE_ALIASES.get(value.upper())
    if alias is not None:
        return alias

    lowered = value.lower()
    for language in ProgrammingLanguage:
        if language.value.lower() == lowered:
            return language
    for language, info in LANGUAGE_DETAILS.items():
        if info.display_name.lower() == lowered:
            return language
    for language, info in LANGUAGE_DETAILS.items():
        if any(extension.lower() == lowered for extension in info.file_extensions):
            return language
    return None


def resolve_language(value: str) -> ProgrammingLanguage:
    """Resolve an identifier, display name or file extension to a language.

    Unrecognized input falls back to ``GENERIC`` so a migration never halts on
    an unexpected extension.

    Args:
        value: Language identifier, display name or extension (any case).

    Returns:
        Resolved language.

    Raises:
        UnknownLanguageError: If ``value`` is empty or whitespace-only.
    """
    trimmed = value.strip()
    if not trimmed:
        raise UnknownLanguageError("Language input cannot be empty")
    language = _lookup(trimmed)
    if language is None:
        logger.debug("language_fallback value=%s language=%s", trimmed, "GENERIC")
        return ProgrammingLanguage.GENERIC
    return language


def parse_language(value: str) -> ProgrammingLanguage:
    """Resolve a language strictly, rejecting unrecognized input.

    Args:
        value: Language identifier, display name or extension (any case).

    Returns:
        Resolved language.

    Raises:
        UnknownLanguageError: If ``value`` is empty or matches no language.
    """
    trimmed = value.strip()
    if not trimmed:
        raise UnknownLanguageError("Language input cannot be empty")
    language = _lookup(trimmed)
    if language is None:
        available = ", ".join(info.display_name for info in LANGUAGE_DETAILS.values())
        raise UnknownLanguageError(
            f'Unknown programming language: "{trimmed}". '
            f"Available languages: {available}"
        )
    return language


def comment_style_for(language: ProgrammingLanguage) -> CommentStyle | None:
    """Return the line comment syntax of a language.

    Args:
        language: Resolved language.

    Returns:
        Comment style, or ``None`` for data-only formats without comments.
    """
    return COMMENT_STYLES.get(language, _SLASH_SLASH)
