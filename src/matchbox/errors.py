"""Diagnostics, their terminal rendering, and the language error taxonomy."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from matchbox.source import Span


class Severity(Enum):
    ERROR = "error"


_RED = "\033[1;31m"
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"


@dataclass(frozen=True)
class DiagnosticLabel:
    """The source range a diagnostic points at."""

    span: Span


@dataclass
class Diagnostic:
    severity: Severity
    code: str
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


class DiagnosticRenderer:
    """Renders a diagnostic as a header, a location, the source line and notes.

    ``sources`` maps file names to program text that may not exist on disk
    (``eval`` input, tests). Other files are read lazily.
    """

    def __init__(
        self, *, color: bool = True, sources: dict[str, str] | None = None,
    ) -> None:
        self.color = color
        self._lines: dict[str, list[str]] = {
            name: text.splitlines() for name, text in (sources or {}).items()
        }

    def _paint(self, code: str, text: str) -> str:
        return f"{code}{text}{_RESET}" if self.color else text

    def _line(self, filename: str, number: int) -> str | None:
        if filename not in self._lines:
            path = Path(filename)
            try:
                self._lines[filename] = (
                    path.read_text().splitlines() if path.is_file() else []
                )
            except OSError:
                self._lines[filename] = []
        lines = self._lines[filename]
        return lines[number - 1] if 0 < number <= len(lines) else None

    def _excerpt(self, span: Span) -> list[str]:
        text = self._line(span.file, span.start_line)
        if text is None:
            return []
        bar = self._paint(_BLUE, "|")
        # multi-line spans are underlined to the end of their first line
        last = span.end_col if span.end_line == span.start_line else len(text)
        width = max(1, last - span.start_col + 1)
        return [
            f"  {self._paint(_BLUE, f'{span.start_line:>4}')} {bar} {text}",
            f"       {bar} {' ' * (span.start_col - 1)}{self._paint(_RED, '^' * width)}",
        ]

    def render(self, diag: Diagnostic) -> str:
        out = [
            self._paint(_RED, f"{diag.severity.value}[{diag.code}]")
            + self._paint(_BOLD, f": {diag.message}")
        ]
        for label in diag.labels:
            out.append(f"  {self._paint(_BLUE, '-->')} {label.span}")
            out.extend(self._excerpt(label.span))
        out.extend(f"  {self._paint(_BLUE, '=')} note: {n}" for n in diag.notes)
        return "\n".join(out)


class CompileError(Exception):
    """Front-end failure carrying one or more diagnostics."""

    def __init__(self, diagnostics: list[Diagnostic]) -> None:
        self.diagnostics = diagnostics
        messages = [d.message for d in diagnostics]
        super().__init__(f"{len(diagnostics)} error(s): {'; '.join(messages)}")


# ── Language errors ─────────────────────────────────────────────


class LangError(Exception):
    """Base class for errors raised by the checker and the evaluator.

    The first violation is fatal to the enclosing ``typecheck`` or
    ``evaluate`` call; callers decide whether to continue with the next
    top-level statement.
    """

    code = "E000"

    def __init__(self, message: str, span: Span | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.span = span

    def at(self, span: Span | None) -> LangError:
        """Attach ``span`` unless a more precise one is already known."""
        if self.span is None:
            self.span = span
        return self

    def to_diagnostic(self, note: str | None = None) -> Diagnostic:
        labels = []
        if self.span is not None:
            labels.append(DiagnosticLabel(span=self.span))
        return Diagnostic(
            severity=Severity.ERROR,
            code=self.code,
            message=self.message,
            labels=labels,
            notes=[note] if note else [],
        )


class UnboundName(LangError):
    code = "E310"

    def __init__(self, name: str, span: Span | None = None) -> None:
        super().__init__(f"unbound name '{name}'", span)
        self.name = name


class Redefinition(LangError):
    code = "E301"

    def __init__(self, name: str, span: Span | None = None) -> None:
        super().__init__(f"duplicate definition of '{name}'", span)
        self.name = name


class ArityMismatch(LangError):
    code = "E330"

    def __init__(
        self, what: str, expected: int, got: int, span: Span | None = None,
    ) -> None:
        super().__init__(
            f"wrong number of arguments to {what}: expected {expected}, got {got}",
            span,
        )
        self.expected = expected
        self.got = got


class TypeMismatch(LangError):
    code = "E321"


class NonExhaustiveMatch(LangError):
    code = "E371"


class InvalidAssignTarget(LangError):
    code = "E315"
