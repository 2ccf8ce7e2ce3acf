"""
Hunk Header Parser and Diff Line Classifier

Parses unified diff hunk headers and classifies hunk body lines.
Both are pure functions shared by the annotator and the line index.
"""

import re
from enum import Enum
from typing import Optional, Tuple

from ..models.diff import HunkHeader, LineType
from .errors import InvalidHeader


HUNK_HEADER_PATTERN = re.compile(r'^@@\s+-(\d+)(?:,(\d+))?\s+\+(\d+)(?:,(\d+))?\s+@@(.*)$')

NO_NEWLINE_PREFIX = '\\'
PLACEHOLDER = '--'
DEFAULT_LINE_NUM_WIDTH = 4

LINE_MARKERS = {
    LineType.ADD: '[+]',
    LineType.DELETE: '[-]',
    LineType.CONTEXT: '   ',
    LineType.NO_NEWLINE: '   ',
}


class UnknownPrefixPolicy(str, Enum):
    """
    What to do with a hunk body line that starts with none of `+`, `-`,
    `\\` or a space.

    TREAT_AS_CONTEXT (TreatUnknownPrefixAsContext) is the default: such
    lines, including blank lines that lost their leading space, count as
    unchanged context. STRICT rejects them.
    """
    TREAT_AS_CONTEXT = "context"
    STRICT = "strict"


def is_hunk_header(line: str) -> bool:
    """Cheap prefix test; use parse_hunk_header to validate."""
    return line.startswith('@@')


def parse_hunk_header(line: str) -> HunkHeader:
    """
    Parse a unified diff hunk header.

    Args:
        line: Header line, e.g. `@@ -10,5 +12,7 @@ def foo():`

    Returns:
        HunkHeader; omitted counts default to 1, trailing text becomes
        the context (None when empty)

    Raises:
        InvalidHeader: If the line is not a well-formed hunk header
    """
    if line is None:
        raise InvalidHeader("Hunk header is missing")

    match = HUNK_HEADER_PATTERN.match(line.rstrip('\r'))
    if not match:
        raise InvalidHeader(f"Invalid hunk header: {line!r}", line=line)

    context = match.group(5).strip()
    try:
        return HunkHeader(
            old_start=int(match.group(1)),
            old_count=int(match.group(2)) if match.group(2) is not None else 1,
            new_start=int(match.group(3)),
            new_count=int(match.group(4)) if match.group(4) is not None else 1,
            context=context or None,
        )
    except ValueError as e:
        raise InvalidHeader(f"Invalid hunk header {line!r}: {e}", line=line)


def classify_line(
    line: str,
    policy: UnknownPrefixPolicy = UnknownPrefixPolicy.TREAT_AS_CONTEXT
) -> Tuple[LineType, str]:
    """
    Classify a hunk body line and strip its one-character prefix.

    Args:
        line: Raw line from a hunk body
        policy: Handling of lines with an unknown prefix

    Returns:
        Tuple of (line type, content)

    Raises:
        ValueError: For an unknown prefix under the STRICT policy
    """
    if line.startswith('+'):
        return LineType.ADD, line[1:]
    if line.startswith('-'):
        return LineType.DELETE, line[1:]
    if line.startswith(' '):
        return LineType.CONTEXT, line[1:]
    if line.startswith(NO_NEWLINE_PREFIX):
        # "\ No newline at end of file" passes through verbatim
        return LineType.NO_NEWLINE, line

    if UnknownPrefixPolicy(policy) is UnknownPrefixPolicy.STRICT:
        raise ValueError(f"Unknown diff line prefix: {line[:1]!r}")
    return LineType.CONTEXT, line


def line_marker(line_type: LineType) -> str:
    """Three-character marker column: `[+]`, `[-]` or three spaces."""
    return LINE_MARKERS[LineType(line_type)]


def format_line_num(num: Optional[int], width: int = DEFAULT_LINE_NUM_WIDTH) -> str:
    """Right-justify a line number, or the `--` placeholder for None."""
    if num is None:
        return PLACEHOLDER.rjust(width)
    return str(num).rjust(width)


def line_num_width(header: HunkHeader, minimum: int = DEFAULT_LINE_NUM_WIDTH) -> int:
    """Column width wide enough for every line number in the hunk."""
    max_num = max(header.old_end, header.new_end)
    return max(minimum, len(str(max_num)))
