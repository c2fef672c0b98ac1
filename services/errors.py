"""Exceptions raised while reading and parsing sensor output."""

from __future__ import annotations

from models.readings import ErrorKind


class SensorsError(Exception):
    """Base class for failures that end up as an error snapshot."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class SourceUnavailable(SensorsError):
    """The external command could not be launched, timed out or exited non-zero."""

    kind = ErrorKind.source_unavailable


class NoDataFound(SensorsError):
    """The command ran but its output contained no sections."""

    kind = ErrorKind.no_data_found
