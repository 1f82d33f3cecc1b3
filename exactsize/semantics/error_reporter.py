"""
Error emission helper for semantic passes.

Provides a thin wrapper around internals.errors.emit() so passes can write

    self.err = PassErrorReporter(self.reporter)
    self.err.emit(er.ERR.SZ0101, field.loc)

instead of threading the reporter through every call.
"""

from typing import Optional
from exactsize.internals.report import Span, Reporter
from exactsize.internals import errors as er


class PassErrorReporter:
    """Binds a Reporter so passes can emit catalog errors directly."""

    def __init__(self, reporter: Reporter):
        self.reporter = reporter

    def emit(self, error_msg: er.ErrorMessage, span: Optional[Span], **kwargs) -> None:
        """Emit an error or warning.

        Args:
            error_msg: The error message from er.ERR (e.g., er.ERR.SZ0101)
            span: Source location span (None for programmatically built shapes)
            **kwargs: Format parameters for the error message
        """
        er.emit(self.reporter, error_msg, span, **kwargs)

    @property
    def error_count(self) -> int:
        return len(self.reporter.errors)
