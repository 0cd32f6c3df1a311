"""Diagnostics: error codes, source spans and the rendering of compiler and runtime errors."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Iterable, Optional, TextIO

COLOR_RED = "\x1b[31m"
COLOR_GREEN = "\x1b[32m"
COLOR_BLUE = "\x1b[34m"
COLOR_CYAN = "\x1b[36m"
COLOR_RESET = "\x1b[0m"

SUGGESTION_DISTANCE = 4


class ErrorCode(IntEnum):
    """Numeric codes shown as ``E0000`` in diagnostic headers."""

    PARSE = 1
    TYPE = 2
    RUNTIME = 3
    IO = 4
    UNDEFINED_VARIABLE = 100
    TYPE_MISMATCH = 101
    SCOPE_ERROR = 102
    FUNCTION_CALL = 103
    PRIVATE_ACCESS = 104
    IMMUTABLE_ASSIGNMENT = 105
    GENERAL = 199


@dataclass(frozen=True)
class SourceSpan:
    """A highlighted stretch of one source line; line and column are one-based."""

    file_path: Optional[str] = None
    line: int = 1
    column: int = 1
    length: int = 1


@dataclass
class Diagnostic:
    """An error message with its location, optional extra spans, help and notes.

    ``source_text`` is the text of the primary line when it is already known;
    otherwise the line is read from the span's file.
    """

    code: int
    message: str
    primary_span: SourceSpan = field(default_factory=SourceSpan)
    secondary_spans: list = field(default_factory=list)
    help: Optional[str] = None
    notes: list = field(default_factory=list)
    source_text: Optional[str] = None


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance between two strings (insertions, deletions, substitutions)."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (ca != cb),
                )
            )
        previous = current
    return previous[-1]


def closest_name(name: str, candidates: Iterable[str]) -> Optional[str]:
    """Return the first candidate nearest to ``name`` within a small edit distance, or None."""
    best: Optional[str] = None
    best_distance = SUGGESTION_DISTANCE
    for candidate in candidates:
        distance = levenshtein_distance(name, candidate)
        if distance < best_distance:
            best_distance = distance
            best = candidate
    return best


def _category(code: int) -> str:
    if code == ErrorCode.RUNTIME:
        return "Runtime error"
    if code == ErrorCode.TYPE:
        return "Runtime type error"
    if code == ErrorCode.IO:
        return "Runtime I/O error"
    return "Compile error"


def _read_line(file_path: Optional[str], line_number: int) -> Optional[str]:
    if not file_path:
        return None
    try:
        with Path(file_path).open("r", errors="replace") as handle:
            for number, text in enumerate(handle, start=1):
                if number == line_number:
                    return text.rstrip("\n")
    except OSError:
        return None
    return None


def _excerpt(span: SourceSpan, source_line: str, color: str) -> list[str]:
    padding = "".join(
        "\t" if i < len(source_line) and source_line[i] == "\t" else " "
        for i in range(max(span.column - 1, 0))
    )
    return [
        f" {COLOR_BLUE}{span.line:4d} |{COLOR_RESET} {source_line}",
        f"      | {padding}{color}{'^' * max(span.length, 0)}{COLOR_RESET}",
    ]


def render_diagnostic(diagnostic: Diagnostic) -> str:
    """Format a diagnostic with its header, location, source excerpts, help and notes."""
    span = diagnostic.primary_span
    lines = [
        f"{COLOR_RED}{_category(diagnostic.code)} [E{int(diagnostic.code):04d}]"
        f"{COLOR_RESET}: {diagnostic.message}",
        f"{COLOR_CYAN} --> {span.file_path}:{span.line}:{span.column}{COLOR_RESET}",
    ]

    source_line = diagnostic.source_text
    if source_line is None:
        source_line = _read_line(span.file_path, span.line)
    if source_line is not None:
        lines.extend(_excerpt(span, source_line, COLOR_RED))

    for secondary in diagnostic.secondary_spans:
        secondary_line = _read_line(secondary.file_path, secondary.line)
        if secondary_line is not None:
            lines.extend(_excerpt(secondary, secondary_line, COLOR_CYAN))

    if diagnostic.help:
        lines.append(f"{COLOR_GREEN}help{COLOR_RESET}: {diagnostic.help}")
    lines.extend(f"{COLOR_BLUE}note{COLOR_RESET}: {note}" for note in diagnostic.notes)
    lines.append("")
    return "\n".join(lines) + "\n"


def emit_diagnostic(diagnostic: Diagnostic, stream: Optional[TextIO] = None) -> None:
    """Write a rendered diagnostic to ``stream`` (standard output by default)."""
    out = stream if stream is not None else sys.stdout
    out.write(render_diagnostic(diagnostic))
    out.flush()