"""xjstbuild Source Map - Merges template files and maps merged lines back to them."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class SourceUnit:
    """One template file's full text."""
    source: str
    filename: str


@dataclass(frozen=True)
class LineRecord:
    """Maps a merged line to its origin."""
    merged_line: int
    filename: str
    original_line: int


@dataclass(frozen=True)
class OriginalPosition:
    """Location in an original template file."""
    filename: str
    line: int
    column: int
    source: str

    @property
    def source_line(self) -> str:
        lines = split_lines(self.source)
        if 0 < self.line <= len(lines):
            return lines[self.line - 1]
        return ""


def _strip_terminator(text: str) -> str:
    """Drop a single trailing line terminator."""
    if text.endswith("\r\n"):
        return text[:-2]
    if text.endswith("\n"):
        return text[:-1]
    return text


def split_lines(source: str) -> list[str]:
    """Split on LF only, matching how the line index counts lines."""
    return [line[:-1] if line.endswith("\r") else line
            for line in _strip_terminator(source).split("\n")]


class SourceMap:
    """Merged code of several template files plus a per-line origin index."""

    def __init__(self, units: list[SourceUnit] | None = None, eol: str = os.linesep):
        self.units: tuple[SourceUnit, ...] = tuple(units or [])
        self.eol = eol

        records: list[LineRecord] = []
        owners: list[SourceUnit] = []
        chunks: list[str] = []
        for unit in self.units:
            text = _strip_terminator(unit.source)
            # Each unit starts on a fresh line, so columns never shift.
            for local_line in range(1, text.count("\n") + 2):
                records.append(LineRecord(len(records) + 1, unit.filename, local_line))
                owners.append(unit)
            chunks.append(text)

        self.records: tuple[LineRecord, ...] = tuple(records)
        self.code: str = eol.join(chunks)
        self._owners: tuple[SourceUnit, ...] = tuple(owners)

    def __len__(self) -> int:
        return len(self.records)

    def get_code(self) -> str:
        return self.code

    def get_original(self, line: int, column: int) -> OriginalPosition | None:
        """Get the original location for a merged line, or None outside the index."""
        idx = line - 1  # merged lines are 1-indexed
        if not 0 <= idx < len(self.records):
            return None
        record = self.records[idx]
        return OriginalPosition(
            filename=record.filename,
            line=record.original_line,
            column=column,
            source=self._owners[idx].source,
        )


def merge_sources(units: list[SourceUnit], eol: str = os.linesep) -> SourceMap:
    """Concatenate units in the given order and index every merged line."""
    return SourceMap(units, eol=eol)


def render_context(source: str, line: int, column: int,
                   indent: str = "    ", context: int = 2) -> str:
    """Render the lines around `line` with a caret under the 1-based `column`."""
    lines = split_lines(source)
    first = max(1, line - context)
    last = min(len(lines), line + context)
    width = len(str(last))

    out = []
    for num in range(first, last + 1):
        out.append(f"{indent}{num:>{width}} | {lines[num - 1]}".rstrip())
        if num == line:
            out.append(f"{indent}{' ' * width} | {' ' * max(column - 1, 0)}^")
    return "\n".join(out)
