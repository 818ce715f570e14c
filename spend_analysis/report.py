"""Report rendering: category summaries → presentation-neutral report models.

The output is a list of :class:`CategoryReport` values, one self-contained
fragment per category. Turning fragments into markup, JSON or terminal output
is the job of :mod:`spend_analysis.formatters` or of the caller; wrapping
several inputs into one document is left to the caller entirely.

Sign convention: stored amounts are negative for spend, so a category's
displayed ``total`` is the negated sum (positive spend).
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .errors import SpendAnalysisError
from .models import CategorySummary, TransactionRecord


class TypeStyle(StrEnum):
    """Three-way highlight classification for a record's type tag."""

    SALE = "sale"
    PAYMENT = "payment"
    OTHER = "other"

    @classmethod
    def for_type(cls, transaction_type: str) -> TypeStyle:
        if transaction_type == "Sale":
            return cls.SALE
        if transaction_type == "Payment":
            return cls.PAYMENT
        return cls.OTHER

    @property
    def color(self) -> str:
        return _STYLE_COLORS[self]


_STYLE_COLORS: dict[TypeStyle, str] = {
    TypeStyle.SALE: "#ff8c00",
    TypeStyle.PAYMENT: "#006994",
    TypeStyle.OTHER: "#3cb371",
}


# ---------------------------------------------------------------------------
# Report models
# ---------------------------------------------------------------------------


class _ReportModel(BaseModel):
    # JSON output uses camelCase names (``transactionDate``); Python code uses
    # the snake_case field names.
    model_config = ConfigDict(
        frozen=True, extra="forbid", alias_generator=to_camel, populate_by_name=True
    )


class ReportEntry(_ReportModel):
    """One line item under a category header."""

    type: str
    style: TypeStyle
    transaction_date: date
    amount: Decimal
    description: str


class CategoryReport(_ReportModel):
    """A category header (identifier + displayed total) and its line items."""

    identifier: str
    total: Decimal
    entries: tuple[ReportEntry, ...]


class ErrorNotice(_ReportModel):
    """Replaces a failed input's categories; names the offending condition."""

    kind: str
    message: str
    row: int | None = None
    column: str | None = None

    @classmethod
    def from_error(cls, exc: SpendAnalysisError) -> ErrorNotice:
        return cls(kind=exc.kind, message=exc.message, row=exc.row, column=exc.column)

    def describe(self) -> str:
        where: list[str] = []
        if self.row is not None:
            where.append(f"row {self.row}")
        if self.column is not None:
            where.append(f"column {self.column!r}")
        suffix = f" ({', '.join(where)})" if where else ""
        return f"{self.kind}: {self.message}{suffix}"


class InputReport(_ReportModel):
    """Result for one labeled input: either its categories or an error notice."""

    index: int
    label: str
    categories: tuple[CategoryReport, ...] = ()
    error: ErrorNotice | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def display_total(total: Decimal, *, round_totals: bool) -> Decimal:
    """Negate a summed amount for display, optionally rounding to whole units.

    The raw sum is rounded before negation, with ties going toward positive
    infinity (``floor(x + 0.5)``): a sum of ``-4.50`` shows as ``4`` and a sum of
    ``2.50`` as ``-3``. A zero result is always non-negative.
    """

    if round_totals:
        mode = ROUND_HALF_UP if total >= 0 else ROUND_HALF_DOWN
        total = total.quantize(Decimal(1), rounding=mode)
    shown = Decimal(0) - total
    if shown == 0:
        shown = abs(shown)
    return shown


def render_entry(record: TransactionRecord) -> ReportEntry:
    return ReportEntry(
        type=record.transaction_type,
        style=TypeStyle.for_type(record.transaction_type),
        transaction_date=record.transaction_date,
        amount=record.amount,
        description=record.description,
    )


def render(
    summaries: Iterable[CategorySummary], *, round_totals: bool = True
) -> list[CategoryReport]:
    """Render summaries in the order given, entries in bucket order."""

    return [
        CategoryReport(
            identifier=s.identifier,
            total=display_total(s.total, round_totals=round_totals),
            entries=tuple(render_entry(r) for r in s.records),
        )
        for s in summaries
    ]


__all__ = [
    "CategoryReport",
    "ErrorNotice",
    "InputReport",
    "ReportEntry",
    "TypeStyle",
    "display_total",
    "render",
    "render_entry",
]
