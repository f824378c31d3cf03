"""
scopy - Smart Copy

Aggregates the source files of a directory tree into one text, with
per-file headers, for pasting into chats, reviews and prompts.
"""

__version__ = "0.1.0"
__author__ = "scopy contributors"

from scopy.comments import is_line_comment
from scopy.processor import Config, Processor, Stats
