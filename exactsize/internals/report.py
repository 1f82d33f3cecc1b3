from __future__ import annotations
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Any

from lark import Token

class C:
    """ANSI color/style escape codes."""
    RESET = "\x1b[0m"
    BOLD  = "\x1b[1m"
    DIM   = "\x1b[2m"
    RED   = "\x1b[31m"
    YELLOW = "\x1b[33m"
    CYAN  = "\x1b[36m"
    GRAY  = "\x1b[90m"

@dataclass(frozen=True)
class Span:
    """1-based source range; end_col is exclusive."""
    line: int
    col: int
    end_line: int
    end_col: int

    def __str__(self) -> str:
        return f"{self.line}:{self.col}"

    def width_on(self, line: int) -> int:
        """Number of columns covered on `line` (at least 1)."""
        if self.end_line != self.line or line != self.line:
            return 1
        return max(1, self.end_col - self.col)

@dataclass(frozen=True)
class Diagnostic:
    kind: str  # "error" | "warning"
    code: str
    message: str
    span: Optional[Span] = None
    filename: Optional[str] = None

def span_of(node: Any) -> Optional[Span]:
    """Span of a lark Tree (via propagated meta) or Token; None if unknown."""
    meta = getattr(node, "meta", None)
    if meta is not None and not getattr(meta, "empty", True):
        return Span(meta.line, meta.column, meta.end_line, meta.end_column)
    if isinstance(node, Token) and node.line is not None and node.column is not None:
        return Span(node.line, node.column, node.end_line or node.line, node.end_column or node.column)
    return None


def _plural(n: int, word: str) -> str:
    return f"{n} {word}" if n == 1 else f"{n} {word}s"


class Reporter:
    """Collects diagnostics for one schema source and renders them."""

    def __init__(self, source: Optional[str] = None, filename: str = "<input>") -> None:
        self.source = source
        self.filename = filename
        self.items: List[Diagnostic] = []

    def error(self, code: str, msg: str, span: Optional[Span]):
        self.items.append(Diagnostic("error", code, msg, span, filename=self.filename))

    def warn(self, code: str, msg: str, span: Optional[Span]):
        self.items.append(Diagnostic("warning", code, msg, span, filename=self.filename))

    def extend(self, items: Iterable[Diagnostic]) -> None:
        self.items.extend(items)

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.items if d.kind == "error"]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.items if d.kind == "warning"]

    @property
    def has_errors(self) -> bool:
        return any(d.kind == "error" for d in self.items)

    @property
    def has_warnings(self) -> bool:
        return any(d.kind == "warning" for d in self.items)

    def exit_code(self) -> int:
        """0 = clean, 1 = warnings only, 2 = errors."""
        if self.has_errors:
            return 2
        if self.has_warnings:
            return 1
        return 0

    def summary(self) -> str:
        """One-line tally, e.g. '2 errors, 1 warning'; empty when clean."""
        parts = []
        if self.errors:
            parts.append(_plural(len(self.errors), "error"))
        if self.warnings:
            parts.append(_plural(len(self.warnings), "warning"))
        return ", ".join(parts)

    def _display_name(self, filename: str) -> str:
        try:
            rel_path = Path(filename).resolve().relative_to(Path.cwd())
            return f"./{rel_path}"
        except (ValueError, OSError):
            return Path(filename).name

    def _source_line(self, lineno: int) -> str:
        if not self.source:
            return ""
        lines = self.source.splitlines()
        return lines[lineno - 1] if 0 < lineno <= len(lines) else ""

    def _header(self, d: Diagnostic, use_color: bool) -> str:
        where = self._display_name(d.filename or self.filename)
        if d.span is not None:
            where = f"{where}:{d.span}"
        message = d.message if d.message.endswith('.') else f"{d.message}."
        if not use_color:
            return f"{where}: {d.kind} [{d.code}]: {message}"
        tint = C.RED if d.kind == "error" else C.YELLOW
        return (f"{C.CYAN}{where}{C.RESET}: {C.BOLD}{tint}{d.kind}{C.RESET} "
                f"[{C.DIM}{d.code}{C.RESET}]: {message}")

    def format(self, use_color: bool = True, use_unicode: bool = True) -> str:
        """Render all diagnostics.

        use_color   → ANSI colorize location/kind/guide/markers
        use_unicode → box-drawing guide with a ┯━━ underline instead of ^~~
        """
        out: List[str] = []
        for d in self.items:
            head = self._header(d, use_color)
            if d.span is None:
                out.append(head)
                continue

            text = self._source_line(d.span.line)
            pad = " " * (max(1, d.span.col) - 1)
            width = d.span.width_on(d.span.line)
            tint = C.RED if d.kind == "error" else C.YELLOW

            def paint(s: str, color: str) -> str:
                return f"{color}{s}{C.RESET}" if use_color else s

            if use_unicode:
                out.append(f"{paint('  ╭──┤ ', C.GRAY)}{head}")
                out.append(f"{paint('  │', C.GRAY)}  {text}")
                out.append(f"{paint('  │', C.GRAY)}  {pad}{paint('┯' + '━' * (width - 1), tint)}")
                out.append(f"{paint('  ╰' + '─' * (len(pad) + 2), C.GRAY)}{paint('╯', tint)}")
            else:
                out.append(head)
                out.append(f"  | {text}")
                out.append(f"  | {pad}{'^' + '~' * (width - 1)}")

        return "\n".join(out)

    def print(self, stream=None, use_color: Optional[bool] = None, use_unicode: Optional[bool] = None) -> None:
        """Print diagnostics to `stream` (default: sys.stderr).

        Color is auto-enabled for TTY unless NO_COLOR or TERM=dumb.
        Unicode guides are auto-enabled for TTY unless NO_UNICODE or TERM=dumb.
        """
        stream = stream or sys.stderr
        interactive = getattr(stream, "isatty", lambda: False)()
        plain = os.getenv("TERM") == "dumb"

        if use_color is None:
            use_color = interactive and not plain and os.getenv("NO_COLOR") is None
        if use_unicode is None:
            use_unicode = interactive and not plain and os.getenv("NO_UNICODE") is None

        text = self.format(use_color=use_color, use_unicode=use_unicode)
        if text:
            print(text, file=stream)
