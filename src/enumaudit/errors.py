"""Exception taxonomy for a single analysis pass."""

from __future__ import annotations


class EnumAuditError(Exception):
    """Base class for errors raised by enumaudit."""


class InvalidInputError(EnumAuditError, ValueError):
    """Raised before any work starts when a required input is missing."""


class SymbolGraphError(EnumAuditError, ValueError):
    """Raised when a symbol-graph document is malformed."""


class AnalysisCancelled(EnumAuditError):
    """Raised when cancellation is observed at a checkpoint.

    The partially built report is discarded; there is no partial result.
    """
