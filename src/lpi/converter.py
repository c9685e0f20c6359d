# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Conversion of legacy practices into migrated rules."""

import logging
from collections import Counter

from lpi.context_extractor import DEFAULT_CONTEXT_LINES, extract_code_context
from lpi.language import ProgrammingLanguage, comment_style_for, resolve_language
from lpi.model import (
    SUCCESS_STATUS,
    DetectionMode,
    DetectionProgram,
    DetectionUnitTest,
    Example,
    Practice,
    ValidatedExample,
    ValidatedRule,
)

logger = logging.getLogger(__name__)

UNKNOWN_LANGUAGE: str = "unknown"

# Schema-description extensions reported as one language family.
AVRO_EXTENSIONS: frozenset[str] = frozenset({"avdl", "avsc", "avpr"})


def should_include_detection(practice: Practice) -> bool:
    """Return whether the detection program and unit tests may be migrated.

    Args:
        practice: Legacy practice.

    Returns:
        ``True`` when suggestions are not disabled and the tooling succeeded.
    """
    if practice.suggestions_disabled:
        return False
    if practice.tooling is None:
        return False
    return practice.tooling.status == SUCCESS_STATUS


def add_description_as_comment(
    code: str, description: str, language: ProgrammingLanguage
) -> str:
    """Prepend a description to code as line comments.

    Block-comment syntaxes wrap every description line on its own so the
    header keeps one comment per line.

    Args:
        code: Source code.
        description: Text to turn into comments.
        language: Language whose comment syntax is used.

    Returns:
        Commented code, or ``code`` unchanged when the description is blank or
        the language has no comment syntax.
    """
    if not description.strip():
        return code
    style = comment_style_for(language)
    if style is None:
        return code
    lines = description.split("\n")
    if style.suffix:
        header = "\n".join(f"{style.prefix} {line} {style.suffix}" for line in lines)
    else:
        header = "\n".join(f"{style.prefix} {line}" for line in lines)
    return f"{header}\n{code}"


def example_language_tags(practice: Practice) -> list[str]:
    """Collect the non-empty language tags of a practice's file examples.

    Args:
        practice: Legacy practice.

    Returns:
        Tags in example order.
    """
    return [
        example.snapshot.language
        for example in practice.examples
        if example.snapshot is not None and example.snapshot.language
    ]


def infer_language(practice: Practice) -> str:
    """Infer the dominant language tag among a practice's file examples.

    Ties go to the tag encountered first.

    Args:
        practice: Legacy practice.

    Returns:
        Most frequent tag, or ``UNKNOWN_LANGUAGE`` when no example has one.
    """
    tags = example_language_tags(practice)
    if not tags:
        return UNKNOWN_LANGUAGE
    return Counter(tags).most_common(1)[0][0]


def resolve_tag(tag: str) -> ProgrammingLanguage:
    """Resolve a legacy language tag, treating an empty tag as generic.

    Args:
        tag: Language tag or extension.

    Returns:
        Resolved language.
    """
    if not tag.strip():
        return ProgrammingLanguage.GENERIC
    return resolve_language(tag)


def _all_examples_avro(practice: Practice) -> bool:
    tags = [tag.lower() for tag in example_language_tags(practice)]
    return bool(tags) and all(tag in AVRO_EXTENSIONS for tag in tags)


def _detection_mode(source_code_state: str) -> DetectionMode:
    return "RAW" if source_code_state.strip().upper() == "RAW" else "AST"


class RecordConverter:
    """Convert practices into rules with positive and negative examples."""

    def __init__(self, context_lines: int = DEFAULT_CONTEXT_LINES) -> None:
        """Initialize converter.

        Args:
            context_lines: Context padding around file example ranges.

        Raises:
            ValueError: If ``context_lines`` is negative.
        """
        if context_lines < 0:
            raise ValueError("context_lines must be >= 0")
        self._context_lines = context_lines

    def convert_unit_test(
        self, test: DetectionUnitTest, inferred_language: str
    ) -> ValidatedExample:
        """Convert a detection unit test, prefixing its description as a comment.

        Args:
            test: Detection unit test.
            inferred_language: Dominant language tag of the owning practice.

        Returns:
            Converted example.
        """
        language = resolve_tag(inferred_language)
        description = test.description.strip()
        code = (
            add_description_as_comment(test.code, description, language)
            if description
            else test.code
        )
        return ValidatedExample(code=code, language=language.value)

    def convert_file_example(self, example: Example) -> ValidatedExample:
        """Convert a file example into a padded excerpt.

        Args:
            example: File example with a non-empty snapshot.

        Returns:
            Converted example.

        Raises:
            ValueError: If the example carries no lines.
        """
        if example.snapshot is None:
            raise ValueError("File example has no snapshot")
        code = extract_code_context(
            example.snapshot,
            example.line_range.begin,
            example.line_range.end,
            self._context_lines,
        )
        return ValidatedExample(
            code=code, language=resolve_tag(example.snapshot.language).value
        )

    def convert(self, practice: Practice) -> ValidatedRule:
        """Convert one practice into a rule.

        Unit tests and the detection program are kept only when detection is
        eligible; file examples are always kept.

        Args:
            practice: Legacy practice.

        Returns:
            Converted rule.
        """
        include_detection = should_include_detection(practice)
        inferred_language = infer_language(practice)
        positive: list[ValidatedExample] = []
        negative: list[ValidatedExample] = []

        if include_detection:
            if practice.detection_unit_tests and inferred_language == UNKNOWN_LANGUAGE:
                logger.warning(
                    f"Unit tests present but no language could be inferred "
                    f"(practice={practice.name!r})"
                )
            for test in practice.detection_unit_tests:
                converted = self.convert_unit_test(test, inferred_language)
                (positive if test.is_compliant else negative).append(converted)

        for example in practice.examples:
            if example.snapshot is None or example.snapshot.is_empty():
                logger.warning(
                    f"Skipping file example without content "
                    f"(practice={practice.name!r})"
                )
                continue
            converted = self.convert_file_example(example)
            (positive if example.is_positive else negative).append(converted)

        detection_program = None
        tooling = practice.tooling
        if include_detection and tooling is not None and tooling.program:
            language = (
                ProgrammingLanguage.AVRO.value
                if _all_examples_avro(practice)
                else tooling.language
            )
            if language == ProgrammingLanguage.GENERIC.value:
                logger.warning(
                    f"Tooling language is GENERIC (practice={practice.name!r})"
                )
            detection_program = DetectionProgram(
                code=tooling.program,
                description=tooling.program_description,
                language=language,
                mode=_detection_mode(tooling.source_code_state),
            )

        return ValidatedRule(
            name=practice.name,
            positive_examples=positive,
            negative_examples=negative,
            detection_program=detection_program,
        )
