"""Data models and type aliases for ``spend_analysis``.

Domain values produced inside the pipeline are frozen dataclasses: they are
created once and never mutated, so a single rule set and any number of parsed
ledgers can be shared freely across threads. Presentation-facing models live
in :mod:`spend_analysis.report`.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Literal, NamedTuple, TypeAlias

# ---------------------------------------------------------------------------
# Core record and collections
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TransactionRecord:
    """A single parsed transaction row.

    Attributes
    ----------
    transaction_type:
        Free-text tag from the ``Type`` column (e.g. ``"Sale"``,
        ``"Payment"``, ``"Return"``).
    transaction_date:
        Date from ``Trans Date`` / ``Transaction Date``.
    post_date:
        Date from ``Post Date``.
    description:
        Free-text description used for category matching.
    amount:
        Signed amount. Negative values conventionally mean money spent.
    """

    transaction_type: str
    transaction_date: date
    post_date: date
    description: str
    amount: Decimal


ClassifiedLedger: TypeAlias = dict[str, list[TransactionRecord]]
"""Category identifier → records in that bucket.

Keys follow the rule set's declared order and only non-empty buckets are
present. A record may sit in several buckets when non-exclusive matching is
enabled.
"""


@dataclass(frozen=True, slots=True)
class CategorySummary:
    """Aggregated view of one bucket: the plain sum of its member amounts."""

    identifier: str
    total: Decimal
    records: tuple[TransactionRecord, ...]


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------

CategoryOrder: TypeAlias = Literal["declared", "sorted"]

CATEGORY_ORDERS: tuple[str, ...] = ("declared", "sorted")


@dataclass(frozen=True, slots=True)
class AnalysisPolicy:
    """Explicit policy flags for one :class:`~spend_analysis.api.SpendAnalyzer`.

    Attributes
    ----------
    exclude_type:
        When set (e.g. ``"Payment"``), rows whose ``Type`` equals this value
        are dropped during parsing.
    exclusive_match:
        ``True`` assigns each record to its first matching category only;
        ``False`` assigns it to every matching category.
    category_order:
        ``"declared"`` keeps rule declaration order; ``"sorted"`` orders
        categories by identifier.
    round_totals:
        Round displayed category totals to whole units.
    """

    exclude_type: str | None = None
    exclusive_match: bool = True
    category_order: CategoryOrder = "declared"
    round_totals: bool = True

    def __post_init__(self) -> None:
        if self.category_order not in CATEGORY_ORDERS:
            raise ValueError(
                f"category_order must be one of {', '.join(CATEGORY_ORDERS)}; "
                f"got {self.category_order!r}"
            )
        if self.exclude_type is not None and not self.exclude_type.strip():
            raise ValueError("exclude_type must be non-empty when set")


# ---------------------------------------------------------------------------
# Input units
# ---------------------------------------------------------------------------


class LabeledInput(NamedTuple):
    """One raw CSV text plus the display label supplied by the caller."""

    label: str
    """Display label, typically the uploaded file name."""

    text: str
    """Raw CSV text including the header row."""


LabeledInputs: TypeAlias = Sequence[LabeledInput]
