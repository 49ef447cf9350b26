"""Specific exceptions for the lfadstools package."""

from typing import Iterable, Self


class NotFoundError(LookupError):
    """Raise if datasets that were searched for are not in the collection."""

    def __init__(self: Self, missing: Iterable) -> None:
        self.missing = list(missing)
        self.message = "Missing datasets " + ", ".join(
            str(m) for m in self.missing
        )
        super().__init__(self.message)


class BadOutputDirError(Exception):
    """When the output directory for an export does not exist."""

    def __init__(self: Self, message: str) -> None:
        self.message = message
        super().__init__(message)
