"""
OptionSet - declarative command-line flags bound to caller-owned variables.

This package provides a small getopt-style option table: flags are registered
against attributes of objects the caller owns, parsing writes converted values
straight into those attributes, and the usage text is grouped by section and
word-wrapped to the width of the terminal.
"""

import logging

from .errors import FlagConflictError, OptionParseError, OptionSetError
from .options import OptionEntry, OptionSet, Ref
from .usage import terminal_width

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "1.0.0"
__all__ = [
    "FlagConflictError",
    "OptionEntry",
    "OptionParseError",
    "OptionSet",
    "OptionSetError",
    "Ref",
    "terminal_width",
]
