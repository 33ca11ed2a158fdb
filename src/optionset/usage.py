"""
Usage text layout for OptionSet.

Every registered flag with a description is rendered into one block: the flag
labels, padded to the description column, followed by the description
word-wrapped to the width of the terminal. Blocks are rendered once, when the
flag is registered, and later stitched together by OptionSet.format_usage().
"""

import os
import sys
import textwrap
from typing import Any, Optional, TextIO

FALLBACK_WIDTH = 80
MIN_WIDTH = 40

# Share of the terminal that must stay free for the description on the same
# line as the flag labels.
MIN_TEXT_RATIO = 0.3

UNGROUPED = ("", "_")


def terminal_width(stream: Optional[TextIO] = None) -> int:
    """
    Return the column count of the terminal attached to `stream` (stdin by default).

    Falls back to 80 columns when the stream is not a terminal, has no file
    descriptor, or reports fewer than 40 columns.
    """
    stream = sys.stdin if stream is None else stream
    try:
        columns = os.get_terminal_size(stream.fileno()).columns
    except (AttributeError, OSError, ValueError):
        return FALLBACK_WIDTH
    return columns if columns >= MIN_WIDTH else FALLBACK_WIDTH


def render_default(value: Any) -> str:
    """
    Render the default value suffix appended to a flag description.

    Booleans always render as a switch marker. Numbers render only when
    non-zero, strings only when non-empty.
    """
    if isinstance(value, bool):
        return " <switch>"
    if value is None:
        return ""
    if isinstance(value, (int, float)):
        if not value:
            return ""
        text = f"{value:g}" if isinstance(value, float) else str(value)
    else:
        text = str(value)
    return f" <default: {text}>" if text else ""


def flag_label(
    short_flag: Optional[str], long_flag: Optional[str], indent_flag: int
) -> str:
    """Return the indented `-x --long ` label of a flag."""
    label = " " * indent_flag
    if short_flag:
        label += f"-{short_flag} "
    if long_flag:
        label += f"--{long_flag} "
    return label


def format_entry(
    short_flag: Optional[str],
    long_flag: Optional[str],
    text: str,
    *,
    indent_flag: int,
    indent_description: int,
    width: int,
) -> str:
    """
    Lay out a single usage block.

    Args:
        short_flag: Short flag character, if any.
        long_flag: Long flag name, if any.
        text: Description including the rendered default suffix. Line breaks
            in it are kept, each line is wrapped on its own.
        indent_flag: Indentation before the flag labels.
        indent_description: Column at which descriptions begin.
        width: Total width available.

    Returns:
        str: The block, without a trailing newline.
    """
    prefix = flag_label(short_flag, long_flag, indent_flag)
    if len(prefix) > indent_description:
        prefix += " "
    else:
        prefix = prefix.ljust(indent_description)

    if width - len(prefix) > width * MIN_TEXT_RATIO:
        start = len(prefix)
        head = prefix
    else:
        # not enough room left, description goes below the labels
        start = indent_flag + 2
        head = prefix.rstrip() + "\n" + " " * start

    # explicit line breaks in the description are kept
    lines = []
    for paragraph in text.splitlines():
        wrapped = textwrap.wrap(
            paragraph,
            width=max(width - start, 1),
            break_long_words=False,
            break_on_hyphens=False,
        )
        lines.extend(wrapped or [""])

    indent = " " * start
    rest = [indent + line if line else "" for line in lines[1:]]
    return "\n".join([head + (lines[0] if lines else "")] + rest)


def format_sections(header: str, sections: dict[str, list[str]]) -> str:
    """Join pre-rendered blocks into the full usage text."""
    parts = [header] if header else []
    for group, blocks in sections.items():
        if group not in UNGROUPED:
            parts.append(f"{group}:\n")
        parts.extend(f"{block}\n" for block in blocks)
        parts.append("\n")
    return "".join(parts)
