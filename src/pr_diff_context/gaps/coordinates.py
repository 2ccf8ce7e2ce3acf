"""
Gap Coordinates

Coordinate arithmetic for collapsed regions between hunks.

Unified diffs track two coordinate systems. OLD coordinates number the base
revision; NEW coordinates number the modified one. Inside a gap nothing
changes, so NEW - OLD is constant from the gap's start onward. The exception
is the gap before the first hunk of a file, whose new-side end can diverge
from its old-side end; that gap carries an explicit `end_line_new`.

AI suggestions usually target NEW coordinates while file content for an
expansion is fetched by OLD coordinates, hence the lookup and conversion
helpers at the bottom of this module.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from ..models.diff import AnnotatedFile
from ..models.gap import (
    ExpansionResult,
    Gap,
    GapMatch,
    GapPosition,
    RevealedRange,
    SplitResult,
)


logger = logging.getLogger(__name__)


DEFAULT_EXPAND_LINES = 20
SMALL_GAP_THRESHOLD = 10
AUTO_EXPAND_THRESHOLD = 6


def make_gap(
    start_line: int,
    end_line: int,
    start_line_new: Optional[int] = None,
    end_line_new: Optional[int] = None,
    position: GapPosition = GapPosition.BETWEEN
) -> Optional[Gap]:
    """
    Build a gap, dropping an end_line_new that the offset already implies.

    Args:
        start_line: OLD start
        end_line: OLD end
        start_line_new: NEW start (defaults to start_line)
        end_line_new: NEW end when it may differ from the derived value
        position: Gap position within the file

    Returns:
        Gap, or None when the OLD span is empty
    """
    if end_line < start_line:
        return None

    if start_line_new is None:
        start_line_new = start_line

    derived_end = start_line_new + (end_line - start_line)
    if end_line_new is not None and end_line_new == derived_end:
        end_line_new = None

    return Gap(
        start_line=start_line,
        end_line=end_line,
        start_line_new=start_line_new,
        end_line_new=end_line_new,
        position=position,
    )


def _check_count(count: int) -> None:
    if count <= 0:
        raise ValueError(f"Expansion count must be positive, got {count}")


def expand_from_bottom(gap: Gap, count: int) -> ExpansionResult:
    """
    Reveal `count` lines at the bottom edge of a gap (just above a hunk).

    The remaining gap's new-side end is always re-derived with the uniform
    offset formula; it keeps an explicit end_line_new only if the original
    gap had one.

    Args:
        gap: Gap to shrink
        count: Number of lines to reveal

    Returns:
        ExpansionResult with the revealed lines and the remaining gap (None
        when the whole gap was revealed)
    """
    _check_count(count)
    count = min(count, gap.size)

    new_end = gap.end_line - count
    resolved_end_new = gap.resolved_end_line_new
    revealed = RevealedRange(
        start_line=new_end + 1,
        end_line=gap.end_line,
        start_line_new=resolved_end_new - count + 1,
        end_line_new=resolved_end_new,
    )

    remaining = None
    if new_end >= gap.start_line:
        remaining_end_new = gap.start_line_new + (new_end - gap.start_line)
        remaining = Gap(
            start_line=gap.start_line,
            end_line=new_end,
            start_line_new=gap.start_line_new,
            end_line_new=remaining_end_new if gap.has_explicit_end_new else None,
            position=gap.position,
        )

    logger.debug(f"Expanded {count} lines up from OLD {gap.end_line}")
    return ExpansionResult(revealed=revealed, remaining=remaining)


def expand_from_top(gap: Gap, count: int) -> ExpansionResult:
    """
    Reveal `count` lines at the top edge of a gap (just below a hunk).

    Start lines advance in lock-step on both sides; an explicit
    end_line_new is inherited unchanged.

    Args:
        gap: Gap to shrink
        count: Number of lines to reveal

    Returns:
        ExpansionResult with the revealed lines and the remaining gap
    """
    _check_count(count)
    count = min(count, gap.size)

    revealed = RevealedRange(
        start_line=gap.start_line,
        end_line=gap.start_line + count - 1,
        start_line_new=gap.start_line_new,
        end_line_new=gap.start_line_new + count - 1,
    )

    remaining = None
    new_start = gap.start_line + count
    if new_start <= gap.end_line:
        remaining = Gap(
            start_line=new_start,
            end_line=gap.end_line,
            start_line_new=gap.start_line_new + count,
            end_line_new=gap.end_line_new,
            position=gap.position,
        )

    logger.debug(f"Expanded {count} lines down from OLD {gap.start_line}")
    return ExpansionResult(revealed=revealed, remaining=remaining)


def expand_all(gap: Gap) -> RevealedRange:
    """Reveal every line of the gap."""
    return RevealedRange(
        start_line=gap.start_line,
        end_line=gap.end_line,
        start_line_new=gap.start_line_new,
        end_line_new=gap.resolved_end_line_new,
    )


def split_by_range(gap: Gap, expand_start: int, expand_end: int) -> SplitResult:
    """
    Pull an explicit OLD-line range out of a gap.

    The gap above recomputes its end from start + offset; the gap below
    starts at the same offset and inherits the original new-side end.

    Args:
        gap: Gap to split
        expand_start: First OLD line to reveal
        expand_end: Last OLD line to reveal

    Returns:
        SplitResult; empty sub-gaps are None

    Raises:
        ValueError: If the range is inverted or does not touch the gap
    """
    if expand_start > expand_end:
        raise ValueError(f"Invalid range: {expand_start}-{expand_end}")
    if not ranges_overlap(expand_start, expand_end, gap.start_line, gap.end_line):
        raise ValueError(
            f"Range {expand_start}-{expand_end} is outside gap "
            f"{gap.start_line}-{gap.end_line}"
        )

    expand_start = max(expand_start, gap.start_line)
    expand_end = min(expand_end, gap.end_line)
    line_offset = gap.offset

    above_end = expand_start - 1
    above = make_gap(
        start_line=gap.start_line,
        end_line=above_end,
        start_line_new=gap.start_line_new,
        end_line_new=gap.start_line_new + (above_end - gap.start_line),
        position=gap.position,
    )

    below_start = expand_end + 1
    below = make_gap(
        start_line=below_start,
        end_line=gap.end_line,
        start_line_new=below_start + line_offset,
        end_line_new=gap.resolved_end_line_new,
        position=gap.position,
    )

    revealed = RevealedRange(
        start_line=expand_start,
        end_line=expand_end,
        start_line_new=expand_start + line_offset,
        end_line_new=expand_end + line_offset,
    )
    return SplitResult(above=above, revealed=revealed, below=below)


def ranges_overlap(line_start: int, line_end: int, range_start: int, range_end: int) -> bool:
    """True if [line_start, line_end] and [range_start, range_end] intersect."""
    return line_start <= range_end and line_end >= range_start


def find_matching_gap(gaps: Sequence[Gap], line_start: int, line_end: Optional[int] = None) -> Optional[GapMatch]:
    """
    Find the first gap containing a line range.

    NEW coordinates are checked first because suggestions reference the
    modified file; OLD coordinates are the fallback for each gap.

    Args:
        gaps: Candidate gaps in display order
        line_start: Start of the range
        line_end: End of the range (defaults to line_start)

    Returns:
        GapMatch or None
    """
    if line_end is None:
        line_end = line_start

    for index, gap in enumerate(gaps):
        if ranges_overlap(line_start, line_end, gap.start_line_new, gap.resolved_end_line_new):
            return GapMatch(gap=gap, index=index, matched_in_new_coords=True)
        if ranges_overlap(line_start, line_end, gap.start_line, gap.end_line):
            return GapMatch(gap=gap, index=index, matched_in_new_coords=False)
    return None


def convert_new_to_old(gap: Gap, line_start: int, line_end: int):
    """
    Convert a NEW-coordinate range to OLD coordinates using the gap offset.

    Returns:
        Tuple of (old_start, old_end)
    """
    return line_start - gap.offset, line_end - gap.offset


def _hunk_anchors(hunk) -> Optional[Tuple[int, int, int, int]]:
    """
    OLD/NEW line of a hunk's first row and the line just after it.

    A side with a zero count names the line before the change, so its
    first line is `start + 1`.

    Returns:
        Tuple of (first_old, first_new, after_old, after_new), or None
        when a headerless hunk lacks coordinates on one side
    """
    header = hunk.header
    if header is not None:
        first_old = header.old_start if header.old_count else header.old_start + 1
        first_new = header.new_start if header.new_count else header.new_start + 1
        return first_old, first_new, first_old + header.old_count, first_new + header.new_count

    first_old, first_new = hunk.coordinate_bounds('first')
    last_old, last_new = hunk.coordinate_bounds('last')
    if None in (first_old, first_new, last_old, last_new):
        return None
    return first_old, first_new, last_old + 1, last_new + 1


def compute_file_gaps(annotated: AnnotatedFile, old_line_count: Optional[int] = None) -> List[Gap]:
    """
    Derive the collapsed regions of an annotated file.

    Args:
        annotated: Annotated (non-binary) file
        old_line_count: Length of the base file; enables the gap after the
            last hunk

    Returns:
        Gaps in display order: above the first hunk, between hunks, below
        the last hunk
    """
    if annotated.is_binary or not annotated.hunks:
        return []

    gaps: List[Gap] = []
    anchors = [_hunk_anchors(hunk) for hunk in annotated.hunks]

    if anchors[0] is not None:
        first_old, first_new, _, _ = anchors[0]
        leading = make_gap(
            start_line=1,
            end_line=first_old - 1,
            start_line_new=1,
            end_line_new=first_new - 1,
            position=GapPosition.ABOVE,
        )
        if leading is not None:
            gaps.append(leading)

    for current, following in zip(anchors, anchors[1:]):
        if current is None or following is None:
            continue
        between = make_gap(
            start_line=current[2],
            end_line=following[0] - 1,
            start_line_new=current[3],
            position=GapPosition.BETWEEN,
        )
        if between is not None:
            gaps.append(between)

    if old_line_count is not None and anchors[-1] is not None:
        _, _, after_old, after_new = anchors[-1]
        trailing = make_gap(
            start_line=after_old,
            end_line=old_line_count,
            start_line_new=after_new,
            position=GapPosition.BELOW,
        )
        if trailing is not None:
            gaps.append(trailing)

    logger.debug(f"Computed {len(gaps)} gaps for {annotated.path}")
    return gaps


def is_small_gap(gap: Gap, threshold: int = SMALL_GAP_THRESHOLD) -> bool:
    """Small gaps get a single expand-all control instead of up/down."""
    return gap.size <= threshold


def should_auto_expand(gap: Gap, threshold: int = AUTO_EXPAND_THRESHOLD) -> bool:
    """Gaps below the threshold are revealed without asking."""
    return gap.size < threshold
