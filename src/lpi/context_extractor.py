# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Code excerpt extraction with context padding."""

from lpi.model import FileSnapshot

DEFAULT_CONTEXT_LINES: int = 2


def extract_code_context(
    snapshot: FileSnapshot,
    begin_line: int,
    end_line: int,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> str:
    """Extract the lines of a range padded with surrounding context.

    The window is ``[begin_line - context_lines, end_line + context_lines]``
    clamped to the snapshot bounds. Every stored line inside the window is
    kept in ascending line order, whatever the storage order.

    Args:
        snapshot: Source file snapshot.
        begin_line: First highlighted line.
        end_line: Last highlighted line.
        context_lines: Lines of padding on each side.

    Returns:
        Newline-joined excerpt.

    Raises:
        ValueError: If the snapshot holds no lines.
    """
    if snapshot.is_empty():
        raise ValueError(f"Cannot extract code from empty snapshot: {snapshot.path}")
    start_line = max(snapshot.min_line, begin_line - context_lines)
    stop_line = min(snapshot.max_line, end_line + context_lines)
    return "\n".join(
        snapshot.lines[line]
        for line in sorted(snapshot.lines)
        if start_line <= line <= stop_line
    )
