"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from models.readings import ErrorKind, ReadingSnapshot, SensorSection


class SnapshotStatus(str, Enum):
    """Whether the current snapshot holds sections or an error."""

    ok = "ok"
    error = "error"


class EntryModel(BaseModel):
    """One measurement line within a section."""

    key: str
    value: str
    additional_info: Optional[str] = Field(
        default=None, description="Parenthesised annotation such as limits."
    )


class SectionModel(BaseModel):
    """A sensor chip or zone and its measurements in output order."""

    name: str = Field(..., min_length=1)
    adapter: str = ""
    entries: List[EntryModel] = Field(default_factory=list)

    @classmethod
    def from_section(cls, section: SensorSection) -> SectionModel:
        return cls(
            name=section.name,
            adapter=section.adapter,
            entries=[
                EntryModel(
                    key=entry.key,
                    value=entry.value,
                    additional_info=entry.additional_info,
                )
                for entry in section.entries
            ],
        )


class SnapshotErrorModel(BaseModel):
    kind: ErrorKind
    message: str


class SnapshotResponse(BaseModel):
    """The full current reading, replaced wholesale on every refresh."""

    status: SnapshotStatus
    tick: int = Field(..., ge=0, description="Refresh tick that produced this snapshot.")
    taken_at: datetime
    sections: List[SectionModel] = Field(default_factory=list)
    error: Optional[SnapshotErrorModel] = None

    @classmethod
    def from_snapshot(cls, snapshot: ReadingSnapshot) -> SnapshotResponse:
        if snapshot.error is not None:
            return cls(
                status=SnapshotStatus.error,
                tick=snapshot.tick,
                taken_at=snapshot.taken_at,
                error=SnapshotErrorModel(
                    kind=snapshot.error.kind, message=snapshot.error.message
                ),
            )
        return cls(
            status=SnapshotStatus.ok,
            tick=snapshot.tick,
            taken_at=snapshot.taken_at,
            sections=[SectionModel.from_section(section) for section in snapshot.sections],
        )
