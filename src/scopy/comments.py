"""
Whole-line comment detection.

A textual heuristic shared by every file type. It does not know which
language a file is written in: a line counts as a comment only when its
first non-blank characters are one of the markers below, or when the whole
line is a single-line C-style block comment.
"""

from typing import Tuple


# Checked in order against the stripped line
LINE_COMMENT_MARKERS: Tuple[str, ...] = (
    '//',
    '#',
    '--',
    ';',
    '%',
)


def is_line_comment(line: str) -> bool:
    """
    Check if a line is a comment line.

    Leading and trailing whitespace is ignored. Markers that appear later in
    the line (e.g. ``x = 1  # note``) never make it a comment.
    """
    stripped = line.strip()
    if not stripped:
        return False

    if stripped.startswith('/*') and stripped.endswith('*/'):
        return True

    return stripped.startswith(LINE_COMMENT_MARKERS)
