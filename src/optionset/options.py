"""
OptionSet - declarative command-line flags bound to caller-owned variables.

This module lets a program register short (`-v`) and long (`--verbose`) flags,
bind each one to an attribute of an object the caller owns, parse an argument
list with GNU getopt_long conventions, and render a usage text that is grouped
by section and wrapped to the width of the terminal.
"""

import dataclasses
import logging
import sys
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar

from result import Err, Ok, Result

from .errors import FlagConflictError, OptionParseError
from .usage import format_entry, format_sections, render_default, terminal_width

log = logging.getLogger(__name__)

T = TypeVar("T")
Setter = Callable[[str], None]

# Codes for flags without a short form start above every Unicode code point,
# so they never collide with the ord() of a short flag.
FIRST_SYNTHETIC_CODE = sys.maxunicode + 1

_MISSING: Any = object()


@dataclasses.dataclass
class Ref(Generic[T]):
    """A free-standing variable that a flag can be bound to via its `value`."""

    value: T


@dataclasses.dataclass(frozen=True)
class OptionEntry:
    """One registered flag."""

    code: int
    short_flag: Optional[str]
    long_flag: Optional[str]
    takes_argument: bool
    group: str = ""
    description: str = ""
    default_text: str = ""

    @property
    def name(self) -> str:
        """The flag as it is spelled on the command line, long form preferred."""
        return f"--{self.long_flag}" if self.long_flag else f"-{self.short_flag}"


def _strict_bool(value: str) -> bool:
    """
    Parse a string to a boolean value strictly.

    Only accepts 'True', 'true', 'False', 'false', '1', '0' as valid values.
    Raises ValueError for any other string.
    """
    if value in ("True", "true", "1"):
        return True
    elif value in ("False", "false", "0"):
        return False
    else:
        raise ValueError(
            f"Invalid boolean value: '{value}'. Must be one of: True, true, False, false, 1, 0"
        )


def _get_converter(value_type: Any) -> Callable[[str], Any]:
    """Return the function turning raw argument text into `value_type`."""
    if value_type is bool:
        return _strict_bool
    # str(text) is a plain copy; every other type parses its own text form
    return value_type


def _infer_type(target: Any, attr: str, default: Any) -> Any:
    if default is not _MISSING and default is not None:
        return type(default)
    current = getattr(target, attr, None)
    return type(current) if current is not None else str


def _value_setter(target: Any, attr: str, convert: Callable[[str], Any]) -> Setter:
    def set_value(text: str) -> None:
        setattr(target, attr, convert(text))

    return set_value


def _switch_setter(target: Any, attr: str) -> Setter:
    def toggle(text: str) -> None:
        setattr(target, attr, not getattr(target, attr))

    return toggle


def _normalize_short(short: Optional[str]) -> Optional[str]:
    if not short:
        return None
    if len(short) == 2 and short[0] == "-" and short[1] != "-":
        short = short[1]
    if len(short) != 1 or short == "-" or short.isspace():
        raise ValueError(f"Invalid short flag: {short!r}")
    return short


def _normalize_long(long: Optional[str]) -> Optional[str]:
    if not long:
        return None
    name = long[2:] if long.startswith("--") else long
    if not name or name.startswith("-") or "=" in name or any(c.isspace() for c in name):
        raise ValueError(f"Invalid long flag: {long!r}")
    return name


class OptionSet:
    """
    A table of command-line flags, each bound to an attribute owned by the caller.

    Flags are registered with `add` (typed value flags) and `add_switch`
    (boolean toggles). Registration assigns the default to the bound attribute
    and pre-renders the flag's usage block. `parse` then walks an argument list
    and writes converted values straight into the bound attributes.

    The OptionSet never owns the bound objects; they must stay alive for as
    long as the OptionSet is used to parse.

    Example:
        @dataclass
        class Config:
            verbose: bool = False
            output: str = ""

        config = Config()
        options = OptionSet(header="Usage: tool [options]\\n")
        options.add_switch(config, "verbose", "v", "verbose", "increase verbosity")
        options.add(config, "output", "o", "output", "output file path", "out.txt")

        if not options.parse():
            sys.stderr.write(options.format_usage())
            sys.exit(2)
    """

    def __init__(
        self,
        indent_flag: int = 2,
        indent_description: int = 18,
        header: str = "",
        width: Optional[int] = None,
    ) -> None:
        """
        Args:
            indent_flag: Indentation before the flag labels in usage text.
            indent_description: Column at which descriptions begin.
            header: Text emitted verbatim at the top of the usage text.
            width: Fixed layout width; the terminal width is queried at each
                registration when omitted.
        """
        self.indent_flag = indent_flag
        self.indent_description = indent_description
        self.header = header
        self.width = width

        self.entries: list[OptionEntry] = []
        self.setters: dict[int, Setter] = {}
        self.usage: dict[str, list[str]] = {}

        self._short_flags: dict[str, OptionEntry] = {}
        self._long_flags: dict[str, OptionEntry] = {}
        self._next_code = FIRST_SYNTHETIC_CODE
        self._sealed = False

    def add(
        self,
        target: Any,
        attr: str,
        short: Optional[str] = None,
        long: Optional[str] = None,
        description: str = "",
        default: Any = _MISSING,
        group: str = "",
        *,
        type: Any = None,
    ) -> Optional[OptionEntry]:
        """
        Register a flag that takes a value and bind it to `target.attr`.

        Example:
            options.add(config, "jobs", "j", "jobs", "parallel jobs", 4, "Build")

        Args:
            target: Object owning the bound attribute.
            attr: Name of the attribute receiving the parsed value.
            short: Single-character flag, e.g. "j" or "-j".
            long: Long flag, e.g. "jobs" or "--jobs".
            description: Usage text; an empty description hides the flag.
            default: Initial value assigned to the attribute. Defaults to the
                zero value of the value type. A None default is assigned as is
                and does not decide the value type.
            group: Usage section the flag is listed under.
            type: Value type. Inferred from `default`, or from the attribute's
                current value, when omitted; `str` as a last resort.

        Returns:
            Optional[OptionEntry]: The new entry, or None when neither flag form
            was given.

        Raises:
            FlagConflictError: If the short or long flag is already registered.
            ValueError: If a flag name is malformed.
        """
        short, long = self._check_flags(short, long)
        if short is None and long is None:
            return None

        value_type = type if type is not None else _infer_type(target, attr, default)
        if default is _MISSING:
            default = value_type()

        setattr(target, attr, default)
        setter = _value_setter(target, attr, _get_converter(value_type))
        return self._add_entry(
            short, long, True, description, render_default(default), group, setter
        )

    def add_switch(
        self,
        target: Any,
        attr: str,
        short: Optional[str] = None,
        long: Optional[str] = None,
        description: str = "",
        default: bool = False,
        group: str = "",
    ) -> Optional[OptionEntry]:
        """
        Register a switch that toggles the boolean `target.attr` on every occurrence.

        A long switch accepts and ignores an inline argument (`--verbose=yes`);
        short switches take no argument and may be clustered (`-vq`).

        Raises:
            FlagConflictError: If the short or long flag is already registered.
            ValueError: If a flag name is malformed.
        """
        short, long = self._check_flags(short, long)
        if short is None and long is None:
            return None

        setattr(target, attr, default)
        return self._add_entry(
            short,
            long,
            False,
            description,
            render_default(default),
            group,
            _switch_setter(target, attr),
        )

    def _check_flags(
        self, short: Optional[str], long: Optional[str]
    ) -> tuple[Optional[str], Optional[str]]:
        """Normalize flag names and reject duplicates before anything is stored."""
        if self._sealed:
            raise RuntimeError("Flags cannot be registered after parsing")

        short = _normalize_short(short)
        long = _normalize_long(long)
        if short is not None and short in self._short_flags:
            raise FlagConflictError(f"-{short}")
        if long is not None and long in self._long_flags:
            raise FlagConflictError(f"--{long}")
        return short, long

    def _add_entry(
        self,
        short: Optional[str],
        long: Optional[str],
        takes_argument: bool,
        description: str,
        default_text: str,
        group: str,
        setter: Setter,
    ) -> OptionEntry:
        if short is not None:
            code = ord(short)
        else:
            code = self._next_code
            self._next_code += 1

        entry = OptionEntry(
            code=code,
            short_flag=short,
            long_flag=long,
            takes_argument=takes_argument,
            group=group,
            description=description,
            default_text=default_text,
        )
        self.entries.append(entry)
        self.setters[code] = setter
        if short is not None:
            self._short_flags[short] = entry
        if long is not None:
            self._long_flags[long] = entry

        if description:
            block = format_entry(
                short,
                long,
                description + default_text,
                indent_flag=self.indent_flag,
                indent_description=self.indent_description,
                width=self.width if self.width is not None else terminal_width(),
            )
            self.usage.setdefault(group, []).append(block)

        log.debug("Registered %s with code %d", entry.name, code)
        return entry

    def parse(self, args: Optional[Sequence[str]] = None) -> bool:
        """
        Parse `args` and assign every recognized flag to its bound attribute.

        Args:
            args: Arguments without the program name. If None, uses sys.argv[1:].

        Returns:
            bool: False on the first unrecognized option, missing argument or
            unconvertible value; True once all arguments are consumed.
        """
        return self.safe_parse(args).is_ok()

    def safe_parse(
        self, args: Optional[Sequence[str]] = None
    ) -> Result[list[str], str]:
        """
        Parse `args` like `parse`, reporting why parsing failed.

        Args:
            args: Arguments without the program name. If None, uses sys.argv[1:].

        Returns:
            Result[list[str], str]:
                - Ok with the non-option arguments that were skipped, in order,
                - Err with an error message naming the offending option.
        """
        self._sealed = True
        args = list(sys.argv[1:] if args is None else args)
        try:
            return Ok(self._parse_args(args))
        except OptionParseError as e:
            log.debug("Parsing %r failed: %s", args, e)
            return Err(str(e))

    def _parse_args(self, args: list[str]) -> list[str]:
        skipped = []
        index = 0
        while index < len(args):
            arg = args[index]
            index += 1
            if arg == "--":
                skipped.extend(args[index:])
                break
            if arg.startswith("--"):
                index = self._parse_long(arg[2:], args, index)
            elif arg.startswith("-") and arg != "-":
                index = self._parse_short(arg[1:], args, index)
            else:
                skipped.append(arg)
        return skipped

    def _parse_long(self, token: str, args: list[str], index: int) -> int:
        name, has_inline, inline = token.partition("=")
        entry = self._match_long(name)
        option = f"--{entry.long_flag}"

        if has_inline or not entry.takes_argument:
            value = inline
        elif index < len(args):
            value = args[index]
            index += 1
        else:
            raise OptionParseError(f"option '{option}' requires an argument", option)

        self._dispatch(entry, value, option)
        return index

    def _match_long(self, name: str) -> OptionEntry:
        """Find a long flag by exact name or unambiguous prefix."""
        entry = self._long_flags.get(name)
        if entry is not None:
            return entry

        candidates = [
            flag for flag in self._long_flags if name and flag.startswith(name)
        ]
        if len(candidates) == 1:
            return self._long_flags[candidates[0]]
        if candidates:
            possibilities = " ".join(f"'--{flag}'" for flag in candidates)
            raise OptionParseError(
                f"option '--{name}' is ambiguous; possibilities: {possibilities}",
                f"--{name}",
            )
        raise OptionParseError(f"unrecognized option '--{name}'", f"--{name}")

    def _parse_short(self, cluster: str, args: list[str], index: int) -> int:
        for pos, char in enumerate(cluster):
            option = f"-{char}"
            entry = self._short_flags.get(char)
            if entry is None:
                raise OptionParseError(f"invalid option -- '{char}'", option)

            if not entry.takes_argument:
                self._dispatch(entry, "", option)
                continue

            # the rest of the cluster, if any, is the argument
            value = cluster[pos + 1 :]
            if not value:
                if index >= len(args):
                    raise OptionParseError(
                        f"option requires an argument -- '{char}'", option
                    )
                value = args[index]
                index += 1
            self._dispatch(entry, value, option)
            break
        return index

    def _dispatch(self, entry: OptionEntry, value: str, option: str) -> None:
        try:
            self.setters[entry.code](value)
        except Exception as e:
            raise OptionParseError(
                f"invalid value for '{option}': {value!r} ({e})", option
            ) from e

    def format_usage(self) -> str:
        """
        Return the usage text.

        The header comes first, followed by one section per group in the order
        the groups were first used. Flags without a description are not listed.
        """
        return format_sections(self.header, self.usage)
