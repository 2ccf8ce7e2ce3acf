"""
Diff Annotator

Turns raw unified diff text into a dual-coordinate line model, renders it
as a fixed-width OLD | NEW annotated table, and parses that table back.
"""

import re
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from ..models.diff import AnnotatedFile, AnnotatedHunk, AnnotatedLine, HunkHeader, LineType
from .errors import InvalidHeader, UnparseableSection
from .hunk import (
    DEFAULT_LINE_NUM_WIDTH,
    NO_NEWLINE_PREFIX,
    UnknownPrefixPolicy,
    classify_line,
    format_line_num,
    is_hunk_header,
    line_marker,
    line_num_width,
    parse_hunk_header,
)


logger = logging.getLogger(__name__)


COLUMN_HEADER = ' OLD | NEW |'
BINARY_SENTINEL = 'Binary file (not annotated)'
DEV_NULL = '/dev/null'


@dataclass
class _HunkState:
    """Hunk being read: running counters plus the lines still expected."""
    header: HunkHeader
    header_text: str
    lines: List[AnnotatedLine] = field(default_factory=list)

    def __post_init__(self):
        self.old_num = self.header.old_start
        self.new_num = self.header.new_start
        self.old_remaining = self.header.old_count
        self.new_remaining = self.header.new_count

    @property
    def expects_body(self) -> bool:
        return self.old_remaining > 0 or self.new_remaining > 0

    def add(self, line_type: LineType, content: str) -> None:
        if line_type == LineType.ADD:
            self.lines.append(AnnotatedLine(None, self.new_num, line_type, content))
            self.new_num += 1
            self.new_remaining -= 1
        elif line_type == LineType.DELETE:
            self.lines.append(AnnotatedLine(self.old_num, None, line_type, content))
            self.old_num += 1
            self.old_remaining -= 1
        elif line_type == LineType.CONTEXT:
            self.lines.append(AnnotatedLine(self.old_num, self.new_num, line_type, content))
            self.old_num += 1
            self.new_num += 1
            self.old_remaining -= 1
            self.new_remaining -= 1
        else:
            self.lines.append(AnnotatedLine(None, None, LineType.NO_NEWLINE, content))

    def build(self) -> AnnotatedHunk:
        return AnnotatedHunk(header=self.header, lines=tuple(self.lines), header_text=self.header_text)


@dataclass
class _FileSection:
    """File section between two `diff --git` markers."""
    old_path: Optional[str] = None
    new_path: Optional[str] = None
    renamed_from: Optional[str] = None
    renamed_to: Optional[str] = None
    is_binary: bool = False
    is_new: bool = False
    is_deleted: bool = False
    hunks: List[AnnotatedHunk] = field(default_factory=list)

    def resolve_path(self) -> Optional[str]:
        if self.renamed_to:
            return self.renamed_to
        return self.new_path or self.old_path

    def build(self) -> Optional[AnnotatedFile]:
        """
        Freeze the section into an AnnotatedFile.

        Returns:
            AnnotatedFile, or None for a non-binary section without hunks

        Raises:
            UnparseableSection: If no file path could be determined
        """
        path = self.resolve_path()
        if not path:
            raise UnparseableSection("Could not determine file path for diff section")

        if not self.is_binary and not self.hunks:
            logger.debug(f"Skipping {path}: no hunks")
            return None

        renamed_from = None
        if self.renamed_from and self.renamed_to:
            renamed_from = self.renamed_from

        return AnnotatedFile(
            path=path,
            renamed_from=renamed_from,
            is_binary=self.is_binary,
            hunks=() if self.is_binary else tuple(self.hunks),
        )


class DiffAnnotator:
    """
    Annotator for unified diffs with explicit OLD/NEW line numbers.

    Parsing is best effort: malformed hunk headers and file sections are
    logged and skipped instead of failing the whole diff.
    """

    git_header_pattern = re.compile(r'^diff --git a/(.+) b/(.+)$')
    old_file_pattern = re.compile(r'^---\s+(?:a/)?(.+)$')
    new_file_pattern = re.compile(r'^\+\+\+\s+(?:b/)?(.+)$')
    file_header_pattern = re.compile(r'^=== (.+) ===$')
    row_pattern = re.compile(
        r'^\s*(\d+|--) \|\s*(\d+|--) \|(?: (\[\+\]|\[-\]| {3}) ?(.*)|\s*)$'
    )

    def __init__(
        self,
        min_line_num_width: int = DEFAULT_LINE_NUM_WIDTH,
        unknown_prefix_policy: UnknownPrefixPolicy = UnknownPrefixPolicy.TREAT_AS_CONTEXT
    ):
        """
        Initialize diff annotator.

        Args:
            min_line_num_width: Minimum width of the OLD/NEW columns
            unknown_prefix_policy: Handling of body lines with an unknown prefix
        """
        if min_line_num_width < 2:
            raise ValueError("min_line_num_width must be at least 2")
        self.min_line_num_width = min_line_num_width
        self.unknown_prefix_policy = UnknownPrefixPolicy(unknown_prefix_policy)

    # ------------------------------------------------------------------
    # annotate
    # ------------------------------------------------------------------

    def annotate(self, diff_text: Optional[str]) -> List[AnnotatedFile]:
        """
        Parse unified diff text into annotated files.

        Args:
            diff_text: Raw `git diff` output

        Returns:
            Annotated files in diff order; empty for empty input
        """
        if not diff_text or not diff_text.strip():
            return []

        files: List[AnnotatedFile] = []
        section: Optional[_FileSection] = None
        hunk: Optional[_HunkState] = None
        skipping_hunk = False

        def close_hunk():
            nonlocal hunk
            if hunk is not None and section is not None:
                section.hunks.append(hunk.build())
            hunk = None

        def close_section():
            if section is None:
                return
            try:
                annotated = section.build()
            except UnparseableSection as e:
                logger.warning(f"Skipping unparseable diff section: {e}")
                return
            if annotated is not None:
                files.append(annotated)

        for line in diff_text.split('\n'):
            if line.startswith('diff --git'):
                close_hunk()
                close_section()
                section = self._start_section(line)
                skipping_hunk = False
                continue

            if section is None:
                # Preamble before the first file (e.g. commit message)
                continue

            if is_hunk_header(line):
                try:
                    header = parse_hunk_header(line)
                except InvalidHeader as e:
                    close_hunk()
                    logger.warning(f"Skipping malformed hunk in {section.resolve_path()}: {e}")
                    skipping_hunk = True
                    continue

                close_hunk()
                skipping_hunk = False
                if section.is_binary:
                    continue
                hunk = _HunkState(header=header, header_text=line.rstrip('\r'))
                continue

            if hunk is not None:
                self._consume_body_line(hunk, line)
                continue

            if skipping_hunk:
                continue

            self._consume_header_line(section, line)

        close_hunk()
        close_section()

        logger.debug(f"Annotated diff: {len(files)} files")
        return files

    def _start_section(self, line: str) -> _FileSection:
        section = _FileSection()
        match = self.git_header_pattern.match(line.rstrip('\r'))
        if match:
            section.old_path = match.group(1)
            section.new_path = match.group(2)
        else:
            logger.debug(f"Unrecognised diff --git line: {line!r}")
        return section

    def _consume_body_line(self, hunk: _HunkState, line: str) -> None:
        if line.startswith(NO_NEWLINE_PREFIX):
            hunk.add(LineType.NO_NEWLINE, line)
            return

        if not hunk.expects_body:
            # Header counts consumed: only clearly-prefixed lines extend the hunk
            if not line or line[0] not in '+- ':
                return

        try:
            line_type, content = classify_line(line, self.unknown_prefix_policy)
        except ValueError as e:
            logger.warning(f"Skipping diff line: {e}")
            return
        hunk.add(line_type, content)

    def _consume_header_line(self, section: _FileSection, line: str) -> None:
        line = line.rstrip('\r')

        if line.startswith('---'):
            match = self.old_file_pattern.match(line)
            if match:
                path = match.group(1).split('\t')[0]
                if path == DEV_NULL:
                    section.is_new = True
                else:
                    section.old_path = path
        elif line.startswith('+++'):
            match = self.new_file_pattern.match(line)
            if match:
                path = match.group(1).split('\t')[0]
                if path == DEV_NULL:
                    section.is_deleted = True
                else:
                    section.new_path = path
        elif line.startswith('rename from '):
            section.renamed_from = line[len('rename from '):]
        elif line.startswith('rename to '):
            section.renamed_to = line[len('rename to '):]
        elif line.startswith('new file mode'):
            section.is_new = True
        elif line.startswith('deleted file mode'):
            section.is_deleted = True
        elif line.startswith('Binary files') or line.startswith('GIT binary patch'):
            section.is_binary = True
        # index, mode, similarity and copy lines carry nothing we need

    # ------------------------------------------------------------------
    # render
    # ------------------------------------------------------------------

    def render(self, files: Iterable[AnnotatedFile]) -> str:
        """
        Render annotated files as the fixed-width OLD | NEW table.

        Args:
            files: Annotated files (from annotate or parse)

        Returns:
            Annotated text without a trailing newline
        """
        output: List[str] = []

        for annotated in files:
            output.append(f"=== {annotated.display_path} ===")

            if annotated.is_binary:
                output.append(BINARY_SENTINEL)
                continue

            output.append(COLUMN_HEADER)
            for hunk in annotated.hunks:
                if hunk.header_text:
                    output.append(hunk.header_text)
                width = self._width_for(hunk)
                for line in hunk.lines:
                    output.append(self.render_line(line, width))

        return '\n'.join(output)

    def render_line(self, line: AnnotatedLine, width: Optional[int] = None) -> str:
        """Render one table row."""
        width = width or self.min_line_num_width
        return (
            f"{format_line_num(line.old_line_num, width)} | "
            f"{format_line_num(line.new_line_num, width)} | "
            f"{line_marker(line.type)} {line.content}"
        )

    def _width_for(self, hunk: AnnotatedHunk) -> int:
        if hunk.header is not None:
            return line_num_width(hunk.header, self.min_line_num_width)

        numbers = [n for line in hunk.lines for n in (line.old_line_num, line.new_line_num) if n]
        if not numbers:
            return self.min_line_num_width
        return max(self.min_line_num_width, len(str(max(numbers))))

    # ------------------------------------------------------------------
    # parse
    # ------------------------------------------------------------------

    def parse(self, annotated_text: Optional[str]) -> List[AnnotatedFile]:
        """
        Parse annotated text back into annotated files.

        Tolerates text copied back by a person or an LLM: unrelated lines
        are ignored and rows outside any hunk header form a header-less hunk.

        Args:
            annotated_text: Output of render (possibly edited)

        Returns:
            Reconstructed annotated files
        """
        if not annotated_text:
            return []

        files: List[AnnotatedFile] = []
        current: Optional[dict] = None

        def close_file():
            if current is None:
                return
            try:
                files.append(AnnotatedFile(
                    path=current['path'],
                    renamed_from=current['renamed_from'],
                    is_binary=current['is_binary'],
                    hunks=() if current['is_binary'] else tuple(
                        AnnotatedHunk(header=h['header'], lines=tuple(h['lines']), header_text=h['header_text'])
                        for h in current['hunks']
                    ),
                ))
            except ValueError as e:
                logger.warning(f"Skipping annotated file {current['path']!r}: {e}")

        for line in annotated_text.split('\n'):
            # Rows keep a trailing CR that belongs to the content
            stripped = line.rstrip('\r')

            file_match = self.file_header_pattern.match(stripped)
            if file_match:
                close_file()
                path, renamed_from = self._split_display_path(file_match.group(1))
                current = {'path': path, 'renamed_from': renamed_from, 'is_binary': False, 'hunks': []}
                continue

            if current is None:
                continue

            if stripped.strip() == COLUMN_HEADER.strip():
                continue

            if stripped == BINARY_SENTINEL:
                current['is_binary'] = True
                continue

            if is_hunk_header(stripped):
                try:
                    header = parse_hunk_header(stripped)
                except InvalidHeader as e:
                    logger.debug(f"Ignoring unrecognised hunk marker: {e}")
                    continue
                current['hunks'].append({'header': header, 'header_text': stripped, 'lines': []})
                continue

            annotated_line = self._parse_row(line)
            if annotated_line is None:
                continue
            if not current['hunks']:
                current['hunks'].append({'header': None, 'header_text': None, 'lines': []})
            current['hunks'][-1]['lines'].append(annotated_line)

        close_file()
        return files

    def _split_display_path(self, display_path: str):
        if ' -> ' in display_path:
            old_path, new_path = display_path.split(' -> ', 1)
            return new_path, old_path
        return display_path, None

    def _parse_row(self, line: str) -> Optional[AnnotatedLine]:
        match = self.row_pattern.match(line)
        if not match:
            return None

        old_num = None if match.group(1) == '--' else int(match.group(1))
        new_num = None if match.group(2) == '--' else int(match.group(2))
        marker = match.group(3)
        content = match.group(4) or ''

        if marker == '[+]':
            line_type = LineType.ADD
        elif marker == '[-]':
            line_type = LineType.DELETE
        elif old_num is None and new_num is None and content.startswith(NO_NEWLINE_PREFIX):
            line_type = LineType.NO_NEWLINE
        else:
            line_type = LineType.CONTEXT

        try:
            return AnnotatedLine(old_num, new_num, line_type, content)
        except ValueError as e:
            logger.debug(f"Skipping inconsistent annotated row {line!r}: {e}")
            return None


_default_annotator = DiffAnnotator()


def annotate_diff(diff_text: Optional[str]) -> List[AnnotatedFile]:
    """Annotate diff text with the default annotator."""
    return _default_annotator.annotate(diff_text)


def render_annotated(files: Iterable[AnnotatedFile]) -> str:
    """Render annotated files with the default annotator."""
    return _default_annotator.render(files)


def annotate_and_render(diff_text: Optional[str]) -> str:
    """Annotated text for raw diff text; empty string for empty input."""
    return _default_annotator.render(_default_annotator.annotate(diff_text))


def parse_annotated_diff(annotated_text: Optional[str]) -> List[AnnotatedFile]:
    """Parse annotated text with the default annotator."""
    return _default_annotator.parse(annotated_text)
