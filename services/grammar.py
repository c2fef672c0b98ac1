"""Line grammar for ``sensors`` measurement entries.

An entry line has the shape::

    <key>: <value>[ (<additional info>)]

where ``value`` is an optionally signed decimal number followed by an
optional single space and an optional unit from :data:`UNITS`. The whole
trimmed line must match; anything else is rejected.

The key is non-greedy: every ``:`` followed by whitespace is tried as the
separator from left to right and the first split whose remainder parses
wins, so ``fan: mode: 1200 RPM`` yields the key ``fan: mode``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

UNITS: tuple[str, ...] = ("°C", "RPM", "V", "W", "%", "mA")


@dataclass(frozen=True, slots=True)
class EntryMatch:
    key: str
    value: str
    additional_info: Optional[str] = None


def match_entry(line: str) -> Optional[EntryMatch]:
    """Match ``line`` against the entry grammar, returning ``None`` on failure."""
    for separator in _separator_positions(line):
        value_start = _skip_whitespace(line, separator + 1)
        for value_end in _value_ends(line, value_start):
            matched, info = _parse_annotation(line, value_end)
            if not matched:
                continue
            return EntryMatch(
                key=line[:separator].strip(),
                value=line[value_start:value_end].strip(),
                additional_info=info,
            )
    return None


def _separator_positions(line: str) -> Iterator[int]:
    # The key must be at least one character long.
    for index in range(1, len(line) - 1):
        if line[index] == ":" and line[index + 1].isspace():
            yield index


def _skip_whitespace(line: str, pos: int) -> int:
    while pos < len(line) and line[pos].isspace():
        pos += 1
    return pos


def _number_end(line: str, pos: int) -> Optional[int]:
    if pos < len(line) and line[pos] in "+-":
        pos += 1
    digits_start = pos
    while pos < len(line) and line[pos].isdecimal():
        pos += 1
    if pos == digits_start:
        return None
    if pos < len(line) and line[pos] == ".":
        pos += 1
        while pos < len(line) and line[pos].isdecimal():
            pos += 1
    return pos


def _unit_at(line: str, pos: int) -> Optional[str]:
    for unit in UNITS:
        if line.startswith(unit, pos):
            return unit
    return None


def _value_ends(line: str, pos: int) -> list[int]:
    """Candidate end offsets of the value token, longest first."""
    number_end = _number_end(line, pos)
    if number_end is None:
        return []

    candidates: list[int] = []
    after_space = number_end
    if number_end < len(line) and line[number_end].isspace():
        after_space = number_end + 1
    unit = _unit_at(line, after_space)
    if unit is not None:
        candidates.append(after_space + len(unit))
    if after_space != number_end:
        candidates.append(after_space)
    candidates.append(number_end)
    return candidates


def _parse_annotation(line: str, pos: int) -> tuple[bool, Optional[str]]:
    """Match the optional ``(info)`` tail that must close the line."""
    if pos == len(line):
        return True, None

    open_paren = _skip_whitespace(line, pos)
    if open_paren == pos or open_paren >= len(line):
        return False, None
    if line[open_paren] != "(" or not line.endswith(")"):
        return False, None

    info = line[open_paren + 1 : -1]
    if not info:
        return False, None
    return True, info
