"""
.gitignore-style exclusion patterns.

This is NOT a gitignore implementation. Patterns are matched with a
deliberately permissive policy:

- a relative pattern is joined onto the candidate's directory and
  glob-matched against the candidate path
- independently, any path that contains the raw pattern text is ignored

Negation (``!pattern``), directory-only markers (trailing ``/``) and
anchoring (leading ``/``) are not interpreted, and the substring rule
over-matches: ``build`` ignores ``src/rebuild.go`` too.
"""

import fnmatch
import logging
import os
from typing import List

from scopy.errors import IgnoreFileError

logger = logging.getLogger(__name__)


class GitIgnore:
    """Ordered set of raw ignore patterns loaded from one file."""

    def __init__(self):
        self.patterns: List[str] = []

    def load(self, path: str) -> None:
        """
        Load patterns from a .gitignore file.

        Blank lines and lines starting with ``#`` are skipped; the rest are
        kept stripped, in file order.

        Raises:
            IgnoreFileError: if the file cannot be opened or decoded
        """
        try:
            with open(path, 'r', encoding='utf-8') as f:
                for raw in f:
                    line = raw.strip()
                    if not line or line.startswith('#'):
                        continue
                    self.patterns.append(line)
        except (OSError, UnicodeDecodeError) as e:
            raise IgnoreFileError(path, e) from e

        logger.debug(f"Loaded {len(self.patterns)} ignore patterns from {path}")

    def should_ignore(self, path: str) -> bool:
        """Check if a path is excluded by any loaded pattern."""
        for pattern in self.patterns:
            full_pattern = pattern
            if not os.path.isabs(pattern):
                full_pattern = os.path.normpath(os.path.join(os.path.dirname(path), pattern))

            if fnmatch.fnmatchcase(path, full_pattern):
                return True

            if pattern in path:
                return True

        return False
