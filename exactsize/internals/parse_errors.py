"""Shared parse exception handling for the CLI and the analysis driver."""
from __future__ import annotations

from lark import UnexpectedInput, UnexpectedEOF

from exactsize.internals.report import Reporter, Span


def span_of_exception(exc: UnexpectedInput) -> Span | None:
    line = getattr(exc, "line", None)
    col = getattr(exc, "column", None)
    if not isinstance(line, int) or not isinstance(col, int) or line < 1:
        return None
    return Span(line, col, line, col)


def handle_parse_exception(exc: Exception, reporter: Reporter) -> bool:
    """Handle a parse exception by emitting diagnostics through the reporter.

    Returns:
        True if the exception was handled, False otherwise.
    """
    from exactsize.internals import errors as er
    from exactsize.internals.parser import syntax_message

    if isinstance(exc, UnexpectedEOF):
        er.emit(reporter, er.ERR.SZ0901, None, message="unexpected end of input")
        return True

    if isinstance(exc, UnexpectedInput):
        er.emit(reporter, er.ERR.SZ0901, span_of_exception(exc), message=syntax_message(exc))
        return True

    return False
