"""
Aggregation Pipeline for scopy

Walks a root directory twice:

1. Counting pass - applies the selection rules and counts admitted files
   (metadata only, no file is opened).
2. Content pass - applies the same rules again and streams every admitted
   file into the output: a header line, the content lines (optionally without
   comment lines), and a blank separator line between files.

The count from pass 1 is what lets pass 2 leave out the separator after the
last file without holding the admitted file list in memory.

Files are decoded as UTF-8 with ``surrogateescape``: bytes that are not valid
UTF-8 survive as lone surrogates in get_output() and are written back
unchanged when streaming to a binary-capable stream such as sys.stdout.

Usage:
    from scopy.processor import Config, Processor

    processor = Processor(Config(extensions=("go",)))
    stats = processor.process(".")
    print(processor.get_output())
"""

import io
import logging
import os
import sys
from dataclasses import dataclass, field, replace
from typing import Dict, Iterator, Optional, TextIO, Tuple

from scopy.comments import is_line_comment
from scopy.errors import ConfigError, FileReadError
from scopy.gitignore import GitIgnore
from scopy.selection import check_entry, file_extension, normalize_extensions, should_descend
from scopy.walker import TraversalEntry, WalkAction, walk

logger = logging.getLogger(__name__)


DEFAULT_HEADER_FORMAT = "// file: %s"

GITIGNORE_NAME = ".gitignore"

TEXT_ENCODING = "utf-8"
TEXT_ERRORS = "surrogateescape"


def validate_header_format(header_format: str) -> None:
    """Check the header format takes exactly one string argument."""
    try:
        header_format % "path"
    except (TypeError, ValueError) as e:
        raise ConfigError(f"invalid header format {header_format!r}: {e}") from None


@dataclass(frozen=True)
class Config:
    """
    Settings for one aggregation run.

    Extensions are stored lower-cased without dots. An invalid header format
    raises ConfigError here, before any traversal.
    """
    header_format: str = DEFAULT_HEADER_FORMAT
    exclude_patterns: Tuple[str, ...] = ()
    max_size: int = 0                  # Bytes, 0 = unlimited
    strip_comments: bool = False
    extensions: Tuple[str, ...] = ()
    output_to_memory: bool = True
    include_dot_files: bool = False
    follow_symlinks: bool = False

    def __post_init__(self):
        validate_header_format(self.header_format)
        object.__setattr__(self, "exclude_patterns", tuple(self.exclude_patterns))
        object.__setattr__(self, "extensions", normalize_extensions(self.extensions))


@dataclass(frozen=True)
class Stats:
    """Statistics from an aggregation run."""
    total_files: int = 0
    files_by_ext: Dict[str, int] = field(default_factory=dict)  # "go" -> 2
    total_bytes: int = 0
    total_lines: int = 0              # Headers and separators included
    comments_removed: int = 0

    def copy(self) -> "Stats":
        """Copy that shares no mutable state with this one."""
        return replace(self, files_by_ext=dict(self.files_by_ext))


class _StatsBuilder:
    """Mutable counters for a single run, frozen into Stats at the end."""

    def __init__(self):
        self.total_files = 0
        self.files_by_ext: Dict[str, int] = {}
        self.total_bytes = 0
        self.total_lines = 0
        self.comments_removed = 0

    def add_file(self, ext: str, size: int) -> None:
        self.total_files += 1
        self.files_by_ext[ext] = self.files_by_ext.get(ext, 0) + 1
        self.total_bytes += size

    def freeze(self) -> Stats:
        return Stats(
            total_files=self.total_files,
            files_by_ext=dict(self.files_by_ext),
            total_bytes=self.total_bytes,
            total_lines=self.total_lines,
            comments_removed=self.comments_removed,
        )


class Processor:
    """
    Aggregates the selected files under a root into one text.

    Output goes either to an in-memory buffer (read it with get_output) or
    straight to a text stream, line by line, depending on
    Config.output_to_memory.
    """

    def __init__(self, config: Config, stream: Optional[TextIO] = None):
        self.config = config
        self._stream = stream
        self._buffer = io.StringIO()
        self._stats = Stats()
        self._gitignore = GitIgnore()

    # =========================================================================
    # Public API
    # =========================================================================

    def process(self, base_dir: str) -> Stats:
        """
        Run both passes over base_dir.

        Each call starts from empty stats, an empty buffer and freshly loaded
        ignore patterns.

        Args:
            base_dir: Root directory to aggregate

        Returns:
            Stats for this run

        Raises:
            IgnoreFileError: if base_dir/.gitignore exists but cannot be read
            TraversalError: on a fatal walk error
            FileReadError: if an admitted file cannot be read
        """
        self._buffer = io.StringIO()
        self._stats = Stats()
        self._gitignore = GitIgnore()

        gitignore_path = os.path.join(base_dir, GITIGNORE_NAME)
        if os.path.exists(gitignore_path):
            self._gitignore.load(gitignore_path)

        total_files = self._count_files(base_dir)
        logger.debug(f"Counting pass admitted {total_files} files under {base_dir}")

        builder = _StatsBuilder()
        self._aggregate_files(base_dir, total_files, builder)

        self._stats = builder.freeze()
        logger.debug(
            f"Aggregated {self._stats.total_files} files, "
            f"{self._stats.total_lines} lines, {self._stats.total_bytes} bytes"
        )
        return self._stats.copy()

    def get_stats(self) -> Stats:
        """Stats from the last completed run."""
        return self._stats.copy()

    def get_output(self) -> str:
        """Output stored in memory (empty when streaming)."""
        return self._buffer.getvalue()

    # =========================================================================
    # Passes
    # =========================================================================

    def _admit(self, entry: TraversalEntry) -> bool:
        admitted, reason = check_entry(entry, self.config, self._gitignore)
        if not admitted and not entry.is_dir:
            logger.debug(f"Skipping {entry.path}: {reason}")
        return admitted

    def _walk_admitted(self, base_dir: str, on_file) -> None:
        def visit(entry: TraversalEntry) -> WalkAction:
            if entry.is_dir:
                if should_descend(entry, self.config):
                    return WalkAction.CONTINUE
                logger.debug(f"Skipping directory {entry.path}: dot-named")
                return WalkAction.SKIP_SUBTREE

            if self._admit(entry):
                on_file(entry)
            return WalkAction.CONTINUE

        walk(base_dir, visit, follow_symlinks=self.config.follow_symlinks)

    def _count_files(self, base_dir: str) -> int:
        count = 0

        def on_file(entry: TraversalEntry) -> None:
            nonlocal count
            count += 1

        self._walk_admitted(base_dir, on_file)
        return count

    def _aggregate_files(self, base_dir: str, total_files: int, builder: _StatsBuilder) -> None:
        index = 0

        def on_file(entry: TraversalEntry) -> None:
            nonlocal index
            index += 1
            self._process_file(entry.path, builder, add_separator=index < total_files)
            builder.add_file(file_extension(entry.path), entry.size)

        self._walk_admitted(base_dir, on_file)

    # =========================================================================
    # Per-file output
    # =========================================================================

    def _write_line(self, line: str) -> None:
        text = line + "\n"
        if self.config.output_to_memory:
            self._buffer.write(text)
            return

        stream = self._stream if self._stream is not None else sys.stdout
        raw = getattr(stream, "buffer", None)
        if raw is None:
            stream.write(text)
        else:
            # Undecodable input bytes go back out unchanged
            raw.write(text.encode(TEXT_ENCODING, TEXT_ERRORS))

    def _process_file(self, path: str, builder: _StatsBuilder, add_separator: bool) -> None:
        try:
            f = open(path, 'r', encoding=TEXT_ENCODING, errors=TEXT_ERRORS, newline='\n')
        except OSError as e:
            raise FileReadError(path, e) from e

        with f:
            self._write_line(self.config.header_format % path)
            builder.total_lines += 1

            for line in _read_lines(f, path):
                if self.config.strip_comments and is_line_comment(line):
                    builder.comments_removed += 1
                    continue

                self._write_line(line)
                builder.total_lines += 1

        if add_separator:
            self._write_line("")
            builder.total_lines += 1


def _read_lines(f: TextIO, path: str) -> Iterator[str]:
    """Yield lines without their ``\\n`` or ``\\r\\n`` ending; read errors become FileReadError."""
    try:
        for raw in f:
            line = raw.rstrip('\n')
            if line.endswith('\r'):
                line = line[:-1]
            yield line
    except OSError as e:
        raise FileReadError(path, e) from e
