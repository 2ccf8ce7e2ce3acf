"""
Gap Coordinate Engine

Splitting and expanding collapsed diff regions while keeping OLD and NEW
line numbers consistent.
"""

from .coordinates import (
    make_gap,
    expand_from_bottom,
    expand_from_top,
    expand_all,
    split_by_range,
    ranges_overlap,
    find_matching_gap,
    convert_new_to_old,
    compute_file_gaps,
    is_small_gap,
    should_auto_expand,
)

__all__ = [
    'make_gap',
    'expand_from_bottom',
    'expand_from_top',
    'expand_all',
    'split_by_range',
    'ranges_overlap',
    'find_matching_gap',
    'convert_new_to_old',
    'compute_file_gaps',
    'is_small_gap',
    'should_auto_expand',
]
