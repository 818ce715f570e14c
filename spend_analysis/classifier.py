"""Rule-based description matching.

A pattern matches when its case-folded text is a substring of the case-folded
description. ``str.casefold`` is locale-independent, so results depend only on
the rule set's declaration order and the input text.
"""

from __future__ import annotations

from collections.abc import Iterable

from .logging_setup import get_logger
from .models import ClassifiedLedger, TransactionRecord
from .rules import CategoryRuleSet

_logger = get_logger("spend_analysis.classifier")


def matching_categories(description: str, rule_set: CategoryRuleSet) -> list[str]:
    """Return every category whose patterns match ``description``, in declared order.

    Each category appears at most once no matter how many of its patterns
    match. An empty result means the description belongs in the fallback
    bucket.
    """

    text = description.casefold()
    return [ident for ident, patterns in rule_set.folded if any(p in text for p in patterns)]


def classify(
    records: Iterable[TransactionRecord],
    rule_set: CategoryRuleSet,
    *,
    exclusive_match: bool,
) -> ClassifiedLedger:
    """Assign records to category buckets.

    - ``exclusive_match=True``: a record goes to the first matching category
      in declaration order.
    - ``exclusive_match=False``: a record goes to every matching category.

    In both modes a record that matches nothing goes to the fallback bucket
    and nowhere else. Buckets keep record input order; the returned mapping
    lists non-empty buckets in the rule set's display order.
    """

    buckets: dict[str, list[TransactionRecord]] = {}
    total = 0
    unmatched = 0
    for record in records:
        total += 1
        hits = matching_categories(record.description, rule_set)
        if not hits:
            unmatched += 1
            hits = [rule_set.fallback]
        elif exclusive_match:
            hits = hits[:1]
        for ident in hits:
            buckets.setdefault(ident, []).append(record)

    ledger: ClassifiedLedger = {
        ident: buckets[ident] for ident in rule_set.identifiers if ident in buckets
    }
    _logger.debug(
        "classified %d records into %d buckets (%d unmatched, exclusive=%s)",
        total,
        len(ledger),
        unmatched,
        exclusive_match,
    )
    return ledger


__all__ = ["classify", "matching_categories"]
