"""
File Selection Rules

Decides, for each TraversalEntry, whether the aggregator takes the file.
Checks run in a fixed order and stop at the first rejection:

1. visibility   - dot-named entries need include_dot_files (`.` exempt)
2. .gitignore   - GitIgnore.should_ignore
3. exclusions   - configured substrings
4. extension    - allow-list, case-insensitive, dot optional
5. size         - max_size ceiling when set

Directories only go through check 1; a rejected directory is not descended
into. Everything after check 1 applies to regular files only.

Usage:
    from scopy.selection import admit, check_entry, should_descend
"""

import os
from typing import TYPE_CHECKING, Iterable, Tuple

from scopy.gitignore import GitIgnore
from scopy.walker import TraversalEntry

if TYPE_CHECKING:
    from scopy.processor import Config


def file_extension(path: str) -> str:
    """
    Get the lower-cased extension of a path without its dot.

    The extension is everything after the last ``.`` of the base name, so
    ``.go`` has extension ``go`` and ``Makefile`` has none.
    """
    name = os.path.basename(path)
    dot = name.rfind('.')
    if dot < 0:
        return ''
    return name[dot:].lower().strip('.')


def normalize_extensions(extensions: Iterable[str]) -> Tuple[str, ...]:
    """Lower-case configured extensions and drop their dots."""
    return tuple(ext.lower().strip('.') for ext in extensions)


def is_hidden(entry: TraversalEntry) -> bool:
    """Check if an entry is dot-named; the current directory ``.`` never is."""
    if os.path.normpath(entry.path) == '.':
        return False
    return os.path.basename(entry.path).startswith('.')


def should_descend(entry: TraversalEntry, config: "Config") -> bool:
    """Check if the walk should enter a directory."""
    return config.include_dot_files or not is_hidden(entry)


def is_excluded(path: str, patterns: Iterable[str]) -> bool:
    """Check if path contains any non-empty exclusion pattern."""
    for pattern in patterns:
        if pattern and pattern in path:
            return True
    return False


def check_entry(entry: TraversalEntry, config: "Config", ignore: GitIgnore) -> Tuple[bool, str]:
    """
    Check if an entry is admitted for aggregation.

    Args:
        entry: Entry produced by the walk
        config: Run configuration
        ignore: Loaded .gitignore patterns

    Returns:
        (admitted, reason) - reason is empty string if admitted
    """
    if not config.include_dot_files and is_hidden(entry):
        return False, "dot-named"

    if entry.is_dir:
        return False, "directory"
    if not entry.is_file:
        return False, "not a regular file"

    if ignore.should_ignore(entry.path):
        return False, "matched .gitignore"

    if is_excluded(entry.path, config.exclude_patterns):
        return False, "matched exclude pattern"

    ext = file_extension(entry.path)
    if not ext or ext not in config.extensions:
        return False, "extension not selected"

    if config.max_size > 0 and entry.size > config.max_size:
        return False, f"larger than {config.max_size} bytes"

    return True, ""


def admit(entry: TraversalEntry, config: "Config", ignore: GitIgnore) -> bool:
    """Check if an entry is admitted, without the reason."""
    admitted, _reason = check_entry(entry, config, ignore)
    return admitted
