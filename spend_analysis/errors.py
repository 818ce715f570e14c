"""Exception taxonomy for ``spend_analysis``.

All errors derive from :class:`SpendAnalysisError`, itself a ``ValueError`` so
callers that already guard data problems with ``except ValueError`` keep
working. Input-level errors abort processing of the one input unit in which
they occur; :meth:`spend_analysis.api.SpendAnalyzer.process_many` turns them
into per-input error notices.
"""

from __future__ import annotations


class SpendAnalysisError(ValueError):
    """Base class for data problems detected while processing one input.

    ``row`` is the 1-based data row (the header is not counted) and ``column``
    the header name involved, when known.
    """

    kind = "SpendAnalysisError"

    def __init__(self, message: str, *, row: int | None = None, column: str | None = None):
        super().__init__(message)
        self.message = message
        self.row = row
        self.column = column

    def __str__(self) -> str:
        where: list[str] = []
        if self.row is not None:
            where.append(f"row {self.row}")
        if self.column is not None:
            where.append(f"column {self.column!r}")
        if not where:
            return self.message
        return f"{self.message} ({', '.join(where)})"


class MalformedInputError(SpendAnalysisError):
    """The CSV has no header row or a required column is absent."""

    kind = "MalformedInputError"


class DateParseError(SpendAnalysisError):
    """A date cell does not match ``MM/DD/YYYY``."""

    kind = "DateParseError"


class AmountParseError(SpendAnalysisError):
    """An amount cell is not a finite decimal number."""

    kind = "AmountParseError"


class RuleConfigError(ValueError):
    """A category rule file or rule set is invalid."""


__all__ = [
    "SpendAnalysisError",
    "MalformedInputError",
    "DateParseError",
    "AmountParseError",
    "RuleConfigError",
]
