#!/usr/bin/env python3
"""
Diff Context Demo

Annotates a pull request diff with OLD/NEW line numbers, lists the
collapsed gaps of each file and records context ranges for a few
comments outside the diff.

Usage:
    python examples/pr_diff_context_demo.py <diff_file>
    python examples/pr_diff_context_demo.py <owner> <repo> <pr_number>

Example:
    git diff HEAD~1 > /tmp/change.diff
    python examples/pr_diff_context_demo.py /tmp/change.diff
"""

import sys
import os
import logging

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from pr_diff_context import DiffContextAPI
from pr_diff_context.github.client import GitHubAPIError
from pr_diff_context.gaps.coordinates import compute_file_gaps
from pr_diff_context.models.context_file import CommentTarget


def setup_logging():
    """Set up logging configuration."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def load_diff(api: DiffContextAPI, args) -> str:
    if len(args) == 1:
        with open(args[0], 'r', encoding='utf-8') as f:
            return f.read()

    owner, repo, pr_number = args
    return api.fetch_pull_request_diff(owner, repo, int(pr_number))


def main():
    """Main demo function."""
    setup_logging()
    logger = logging.getLogger(__name__)

    args = sys.argv[1:]
    if len(args) not in (1, 3):
        print("Usage: python pr_diff_context_demo.py <diff_file>")
        print("       python pr_diff_context_demo.py <owner> <repo> <pr_number>")
        sys.exit(1)

    api = DiffContextAPI()

    try:
        diff_text = load_diff(api, args)
    except (OSError, ValueError, GitHubAPIError) as e:
        logger.error(f"Failed to load diff: {e}")
        sys.exit(1)

    files = api.annotate(diff_text)
    if not files:
        print("No files found in diff")
        return

    print("\n📄 Annotated Diff:")
    print(api.render(diff_text))

    print("\n📊 Gaps:")
    for annotated in files:
        if annotated.is_binary:
            continue
        gaps = compute_file_gaps(annotated)
        print(f"   {annotated.display_path}: {len(gaps)} gaps")
        for gap in gaps:
            flag = "auto" if api.should_auto_expand(gap) else ("small" if api.is_small_gap(gap) else "")
            print(
                f"      {gap.position.value:<7} OLD {gap.start_line}-{gap.end_line} "
                f"NEW {gap.start_line_new}-{gap.resolved_end_line_new} {flag}"
            )

    # Comments outside the diff get context ranges
    manager = api.context_manager_for_diff(review_id=1, diff_text=diff_text)
    comments = [
        CommentTarget("docs/OUTSIDE.md"),
        CommentTarget("src/outside.py", 120, 124),
        CommentTarget("src/outside.py", 130),
    ]
    print("\n📚 Context Ranges:")
    for target in comments:
        result = manager.ensure_context_file_for_comment(target)
        print(f"   {target.file} {target.line_start}-{target.line_end}: {result.to_dict()}")

    for entry in api.repository.get_by_review_id(1):
        print(f"   #{entry.id} {entry.file} [{entry.line_start}, {entry.line_end}] {entry.label}")

    print("\n✅ Demo completed successfully!")


if __name__ == '__main__':
    main()
