"""Exceptions raised by OptionSet."""

from typing import Optional


class OptionSetError(Exception):
    """Base class for all optionset errors."""


class FlagConflictError(OptionSetError, ValueError):
    """
    A short or long flag was registered twice.

    This is a programming error in the host application and is raised at the
    point of registration.
    """

    def __init__(self, flag: str) -> None:
        self.flag = flag
        super().__init__(f"Duplicate flag: {flag}")


class OptionParseError(OptionSetError):
    """An argument list could not be parsed against the registered flags."""

    def __init__(self, message: str, option: Optional[str] = None) -> None:
        self.option = option
        super().__init__(message)
