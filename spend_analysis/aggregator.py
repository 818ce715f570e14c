"""Per-category totals over a classified ledger."""

from __future__ import annotations

from decimal import Decimal

from .models import CATEGORY_ORDERS, CategoryOrder, CategorySummary, ClassifiedLedger


def aggregate(
    ledger: ClassifiedLedger, *, category_order: CategoryOrder = "declared"
) -> list[CategorySummary]:
    """Sum each bucket's amounts.

    Sums use plain :class:`~decimal.Decimal` addition with no intermediate
    rounding; sign conventions are applied later by the renderer.

    ``category_order="declared"`` keeps the ledger's key order (the rule
    declaration order as produced by :func:`~spend_analysis.classifier.classify`);
    ``"sorted"`` orders identifiers by code point, independent of locale.
    """

    if category_order not in CATEGORY_ORDERS:
        raise ValueError(f"unknown category_order: {category_order!r}")

    keys = list(ledger)
    if category_order == "sorted":
        keys.sort()

    return [
        CategorySummary(
            identifier=key,
            total=sum((r.amount for r in ledger[key]), Decimal(0)),
            records=tuple(ledger[key]),
        )
        for key in keys
    ]


__all__ = ["aggregate"]
