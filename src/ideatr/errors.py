"""Exceptions raised by ideatr."""

from __future__ import annotations


class IdeatrError(Exception):
    """Base class for ideatr errors."""


class DocumentReadError(IdeatrError):
    """A document could not be read from storage."""

    def __init__(self, locator: str, reason: str = "") -> None:
        self.locator = locator
        self.reason = reason
        message = f"Failed to read document: {locator}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
