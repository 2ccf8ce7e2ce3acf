"""
Diff Coordinate Layer

Hunk header parsing, line classification, annotation and line membership.
"""

from .errors import DiffParseError, InvalidHeader, UnparseableSection
from .hunk import UnknownPrefixPolicy, parse_hunk_header, classify_line
from .annotator import DiffAnnotator, annotate_diff, render_annotated, annotate_and_render, parse_annotated_diff
from .line_set import DiffLineSet, build_diff_line_set

__all__ = [
    'DiffParseError',
    'InvalidHeader',
    'UnparseableSection',
    'UnknownPrefixPolicy',
    'parse_hunk_header',
    'classify_line',
    'DiffAnnotator',
    'annotate_diff',
    'render_annotated',
    'annotate_and_render',
    'parse_annotated_diff',
    'DiffLineSet',
    'build_diff_line_set',
]
