"""
CLI entry point for scopy.

Usage:
    scopy go js                               Copy .go and .js files
    scopy --header-format "/* %s */" go       Customize header format
    scopy --exclude "vendor,dist" go js       Ignore vendor and dist directories
    scopy --max-size 500KB go                 Ignore .go files larger than 500KB
    scopy --strip-comments go js              Remove comments from copied files
    scopy --all go                            Include dot files (hidden files)
    scopy --follow go                         Follow symbolic links
    scopy version                             Show version information

When stdout is a terminal the content is copied to the clipboard; when it is
redirected the content is written to stdout. Statistics always go to stderr.
"""

import argparse
import logging
import sys
from pathlib import Path

import pyperclip

from scopy import __version__
from scopy.config import ScopySettings, build_config
from scopy.errors import ConfigError, ScopyError
from scopy.processor import Processor, Stats


def print_stats(stats: Stats, strip_comments: bool, out=None) -> None:
    """Print the run summary."""
    out = out or sys.stderr
    print("", file=out)
    print(f"Total files: {stats.total_files}", file=out)
    print("Files by extension:", file=out)
    for ext, count in sorted(stats.files_by_ext.items()):
        print(f"  {ext}: {count}", file=out)
    print(f"Total bytes: {stats.total_bytes}", file=out)
    print(f"Total lines: {stats.total_lines}", file=out)

    if strip_comments and stats.comments_removed > 0:
        print(f"Removed lines (comments): {stats.comments_removed}", file=out)


def copy_to_clipboard(text: str) -> None:
    """Copy text to the clipboard, warning on stderr if that fails."""
    # Undecodable input bytes cannot go to the clipboard as-is
    text = text.encode("utf-8", "surrogateescape").decode("utf-8", "replace")
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        print(f"Warning: could not copy to clipboard: {e}", file=sys.stderr)
    else:
        print("Content copied to clipboard!", file=sys.stderr)


def cmd_version() -> int:
    """Display application version."""
    print(f"scopy version {__version__}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scopy",
        description="Smart Copy - Copy content from files with specific extensions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    scopy go js
    scopy --header-format "/* %%s */" go
    scopy --exclude "vendor,dist" go js
    scopy --max-size 500KB go
    scopy --strip-comments go js
    scopy --all go
    scopy --follow go
""",
    )
    parser.add_argument('-v', '--version', action='version', version=f'scopy version {__version__}')

    parser.add_argument('extensions', nargs='+', help='File extensions to copy (e.g. go js .py)')
    parser.add_argument('-f', '--header-format', default=None,
                        help='Format of the header that precedes each file (default: "// file: %%s")')
    parser.add_argument('-e', '--exclude', default=None,
                        help='Patterns to exclude files/directories (comma-separated)')
    parser.add_argument('-s', '--max-size', default=None,
                        help='Maximum size of files to be included (e.g. 500KB, 2MB)')
    parser.add_argument('-c', '--strip-comments', action='store_true',
                        help='Remove comments from code files')
    parser.add_argument('-a', '--all', dest='include_dot_files', action='store_true',
                        help='Include files & directories beginning with a dot (.)')
    parser.add_argument('-F', '--follow', dest='follow_symlinks', action='store_true',
                        help='Follow symbolic links')
    parser.add_argument('--config', type=Path, default=None,
                        help='Settings file (default: .scopy.yaml or ~/.scopy/config.yaml)')
    parser.add_argument('--debug', action='store_true', help='Log selection decisions to stderr')
    return parser


def stdout_is_redirected() -> bool:
    return not sys.stdout.isatty()


def main(argv=None) -> int:
    """Main CLI entry point."""
    argv = sys.argv[1:] if argv is None else list(argv)
    if argv == ['version']:
        return cmd_version()

    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%H:%M:%S',
        stream=sys.stderr,
    )

    redirected = stdout_is_redirected()

    try:
        config = build_config(
            ScopySettings(args.config),
            args.extensions,
            header_format=args.header_format,
            exclude=args.exclude,
            max_size=args.max_size,
            strip_comments=args.strip_comments,
            include_dot_files=args.include_dot_files,
            follow_symlinks=args.follow_symlinks,
            output_to_memory=not redirected,
        )
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    processor = Processor(config)
    try:
        stats = processor.process(".")
    except ScopyError as e:
        print(f"error processing files: {e}", file=sys.stderr)
        return 1

    if not redirected:
        copy_to_clipboard(processor.get_output())

    print_stats(stats, config.strip_comments)
    return 0


if __name__ == "__main__":
    sys.exit(main())
