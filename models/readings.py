"""Domain models for parsed sensor readings."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Sequence


class ErrorKind(str, Enum):
    """Reasons a snapshot can hold an error instead of sections."""

    source_unavailable = "source_unavailable"
    no_data_found = "no_data_found"


@dataclass(frozen=True, slots=True)
class SensorEntry:
    """A single measurement line, e.g. ``Core 0: +45.0°C (high = +80.0°C)``."""

    key: str
    value: str
    additional_info: Optional[str] = None


@dataclass(frozen=True, slots=True)
class SensorSection:
    """A chip or thermal zone with the entries listed beneath its header."""

    name: str
    adapter: str = ""
    entries: tuple[SensorEntry, ...] = ()


@dataclass(frozen=True, slots=True)
class SnapshotError:
    kind: ErrorKind
    message: str


@dataclass(frozen=True, slots=True)
class ReadingSnapshot:
    """The parse result currently held by the application."""

    sections: tuple[SensorSection, ...] = ()
    error: Optional[SnapshotError] = None
    tick: int = 0
    taken_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if self.error is None and not self.sections:
            raise ValueError("A successful snapshot requires at least one section.")
        if self.error is not None and self.sections:
            raise ValueError("An error snapshot cannot carry sections.")

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(
        cls,
        sections: Sequence[SensorSection],
        tick: int = 0,
        taken_at: Optional[datetime] = None,
    ) -> ReadingSnapshot:
        return cls(
            sections=tuple(sections),
            tick=tick,
            taken_at=taken_at or datetime.now(timezone.utc),
        )

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        message: str,
        tick: int = 0,
        taken_at: Optional[datetime] = None,
    ) -> ReadingSnapshot:
        return cls(
            error=SnapshotError(kind=kind, message=message),
            tick=tick,
            taken_at=taken_at or datetime.now(timezone.utc),
        )
