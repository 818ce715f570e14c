"""CSV → :class:`~spend_analysis.models.TransactionRecord` parsing.

Parsing follows RFC 4180 rules via the stdlib :mod:`csv` module (quoted fields
with embedded commas and newlines, doubled quotes). Columns are located by
header name, never by position:

``Type, Trans Date | Transaction Date, Post Date, Description, Amount``

Chase renamed ``Trans Date`` to ``Transaction Date`` around January 2019; both
spellings are accepted so exports from before and after the change parse the
same way. When a file somehow carries both, ``Trans Date`` wins.
"""

from __future__ import annotations

import csv
import re
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from io import StringIO

from .errors import AmountParseError, DateParseError, MalformedInputError
from .logging_setup import get_logger
from .models import TransactionRecord

TYPE_COLUMN = "Type"
TRANSACTION_DATE_COLUMNS: tuple[str, ...] = ("Trans Date", "Transaction Date")
POST_DATE_COLUMN = "Post Date"
DESCRIPTION_COLUMN = "Description"
AMOUNT_COLUMN = "Amount"

DATE_FORMAT = "%m/%d/%Y"
_DATE_RE = re.compile(r"^\d{2}/\d{2}/\d{4}$", re.ASCII)
_AMOUNT_RE = re.compile(r"^-?\d+(\.\d+)?$", re.ASCII)

_logger = get_logger("spend_analysis.parser")


# ---------------------------------------------------------------------------
# Cell parsing
# ---------------------------------------------------------------------------


def parse_date(raw: str | None, *, row: int | None = None, column: str | None = None) -> date:
    """Parse a strict ``MM/DD/YYYY`` date.

    Both month and day must be two digits. Impossible dates such as
    ``13/40/2019`` raise :class:`DateParseError`.
    """

    s = (raw or "").strip()
    if not _DATE_RE.fullmatch(s):
        raise DateParseError(f"invalid MM/DD/YYYY date: {raw!r}", row=row, column=column)
    try:
        return datetime.strptime(s, DATE_FORMAT).date()
    except ValueError as exc:
        raise DateParseError(
            f"invalid MM/DD/YYYY date: {raw!r}", row=row, column=column
        ) from exc


def parse_amount(
    raw: str | None, *, row: int | None = None, column: str | None = None
) -> Decimal:
    """Parse a plain decimal amount such as ``-4.50`` or ``12``.

    Only ASCII digits with an optional leading ``-`` and fractional part are
    accepted; exponents, underscores, ``NaN`` and infinities are rejected even
    though :class:`~decimal.Decimal` would take them.
    """

    s = (raw or "").strip()
    if not s:
        raise AmountParseError("amount is empty", row=row, column=column)
    if not _AMOUNT_RE.fullmatch(s):
        raise AmountParseError(f"invalid amount: {raw!r}", row=row, column=column)
    return Decimal(s)


# ---------------------------------------------------------------------------
# Header resolution
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ColumnMap:
    """Actual header names (as spelled in the file) for each logical column."""

    type: str
    transaction_date: str
    post_date: str
    description: str
    amount: str


def _clean_header(name: str) -> str:
    return name.strip().lstrip("\ufeff").strip()


def resolve_columns(fieldnames: Sequence[str] | None) -> ColumnMap:
    """Map the logical columns onto the file's header row.

    Raises :class:`MalformedInputError` naming every missing column.
    """

    if not fieldnames:
        raise MalformedInputError("CSV appears to have no header row")

    by_clean: dict[str, str] = {}
    for name in fieldnames:
        if name is None:
            continue
        by_clean.setdefault(_clean_header(name), name)

    txn_date = next((by_clean[c] for c in TRANSACTION_DATE_COLUMNS if c in by_clean), None)

    missing: list[str] = []
    if TYPE_COLUMN not in by_clean:
        missing.append(TYPE_COLUMN)
    if txn_date is None:
        missing.append(" or ".join(TRANSACTION_DATE_COLUMNS))
    for col in (POST_DATE_COLUMN, DESCRIPTION_COLUMN, AMOUNT_COLUMN):
        if col not in by_clean:
            missing.append(col)
    if missing:
        raise MalformedInputError("CSV header mismatch. Missing columns: " + ", ".join(missing))

    assert txn_date is not None
    return ColumnMap(
        type=by_clean[TYPE_COLUMN],
        transaction_date=txn_date,
        post_date=by_clean[POST_DATE_COLUMN],
        description=by_clean[DESCRIPTION_COLUMN],
        amount=by_clean[AMOUNT_COLUMN],
    )


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


def _is_blank(row: Mapping[str | None, object]) -> bool:
    # DictReader fills short rows with None and collects extra cells in a list.
    return all(v is None or (isinstance(v, str) and not v.strip()) for v in row.values())


def _data_rows(reader: csv.DictReader) -> Iterator[tuple[int, dict[str | None, str | None]]]:
    """Yield ``(row_no, row)`` pairs, 1-based, turning ``csv.Error`` into input errors."""

    row_no = 0
    try:
        for row in reader:
            row_no += 1
            yield row_no, row
    except csv.Error as exc:
        raise MalformedInputError(f"unreadable CSV: {exc}", row=row_no + 1) from exc


def parse_transactions(
    csv_text: str, *, exclude_type: str | None = None
) -> list[TransactionRecord]:
    """Parse CSV text into records in file order.

    Parameters
    ----------
    csv_text:
        Complete CSV text; the first row is the header.
    exclude_type:
        When set, rows whose (stripped) ``Type`` equals this value are
        dropped, e.g. ``"Payment"`` to leave card payments out of a spend
        analysis.

    Raises
    ------
    MalformedInputError
        No header row, a required column is absent, or the text is not
        readable as CSV (an oversized field, a stray carriage return).
    DateParseError
        A date cell is not ``MM/DD/YYYY``.
    AmountParseError
        The amount cell is not numeric.
    """

    with StringIO(csv_text) as f:
        reader = csv.DictReader(f)
        try:
            fieldnames = reader.fieldnames
        except csv.Error as exc:
            raise MalformedInputError(f"unreadable CSV header: {exc}") from exc
        columns = resolve_columns(fieldnames)

        records: list[TransactionRecord] = []
        excluded = 0
        for row_no, row in _data_rows(reader):
            if _is_blank(row):
                continue
            record = TransactionRecord(
                transaction_type=(row.get(columns.type) or "").strip(),
                transaction_date=parse_date(
                    row.get(columns.transaction_date),
                    row=row_no,
                    column=columns.transaction_date,
                ),
                post_date=parse_date(
                    row.get(columns.post_date), row=row_no, column=columns.post_date
                ),
                description=(row.get(columns.description) or "").strip(),
                amount=parse_amount(row.get(columns.amount), row=row_no, column=columns.amount),
            )
            # Excluded rows are still validated so a bad file fails the same
            # way regardless of the filter.
            if exclude_type is not None and record.transaction_type == exclude_type:
                excluded += 1
                continue
            records.append(record)

    _logger.debug(
        "parsed %d records (%d excluded as %r) using date column %r",
        len(records),
        excluded,
        exclude_type,
        columns.transaction_date,
    )
    return records


__all__ = [
    "ColumnMap",
    "parse_amount",
    "parse_date",
    "parse_transactions",
    "resolve_columns",
]
