"""Turns raw ``sensors`` output into ordered sensor sections."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Union

from models.readings import SensorEntry, SensorSection
from services.errors import NoDataFound
from services.grammar import match_entry

logger = logging.getLogger(__name__)

ADAPTER_MARKER = "Adapter:"


@dataclass(frozen=True)
class NoSectionOpen:
    pass


@dataclass
class SectionOpen:
    """A section still collecting entries; sealed on the next header or at EOF."""

    name: str
    adapter: str = ""
    entries: list[SensorEntry] = field(default_factory=list)

    def seal(self) -> SensorSection:
        return SensorSection(name=self.name, adapter=self.adapter, entries=tuple(self.entries))


ParserState = Union[NoSectionOpen, SectionOpen]


def is_header(line: str) -> bool:
    return ":" not in line and not line.startswith(ADAPTER_MARKER)


def _numbered_lines(raw_text: str) -> Iterator[tuple[int, str]]:
    for line_number, line in enumerate(raw_text.split("\n"), start=1):
        stripped = line.strip()
        if stripped:
            yield line_number, stripped


def _step(
    state: ParserState, line_number: int, line: str
) -> tuple[ParserState, Optional[SensorSection]]:
    """Advance the fold by one line, returning the new state and any sealed section."""
    if is_header(line):
        sealed = state.seal() if isinstance(state, SectionOpen) else None
        return SectionOpen(name=line), sealed

    if isinstance(state, NoSectionOpen):
        logger.debug("Ignoring line outside of any section", extra={"line_number": line_number})
        return state, None

    if line.startswith(ADAPTER_MARKER):
        state.adapter = line[len(ADAPTER_MARKER):].strip()
        return state, None

    match = match_entry(line)
    if match is None:
        logger.debug("Skipping unrecognised line %r", line, extra={"line_number": line_number})
        return state, None

    state.entries.append(
        SensorEntry(key=match.key, value=match.value, additional_info=match.additional_info)
    )
    return state, None


def iter_sections(lines: Iterable[tuple[int, str]]) -> Iterator[SensorSection]:
    state: ParserState = NoSectionOpen()
    for line_number, line in lines:
        state, sealed = _step(state, line_number, line)
        if sealed is not None:
            yield sealed
    if isinstance(state, SectionOpen):
        yield state.seal()


def parse_sensor_output(raw_text: str) -> list[SensorSection]:
    """Parse ``sensors`` output into sections in order of appearance.

    Lines that look like entries but do not match the entry grammar are
    dropped. Raises :class:`NoDataFound` when no section header is present.
    """
    sections = list(iter_sections(_numbered_lines(raw_text)))
    if not sections:
        raise NoDataFound("No sensor data found")
    logger.debug(
        "Parsed sensor output",
        extra={
            "section_count": len(sections),
            "entry_count": sum(len(section.entries) for section in sections),
        },
    )
    return sections
