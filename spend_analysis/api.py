"""Public API and orchestration for the ``spend_analysis`` package.

:class:`SpendAnalyzer` is a stateless service built from an immutable
:class:`~spend_analysis.rules.CategoryRuleSet` and an
:class:`~spend_analysis.models.AnalysisPolicy`. Its :meth:`~SpendAnalyzer.process`
method runs the whole pipeline for one CSV text::

    parse → classify → aggregate → render

and is referentially transparent: the same text always yields an equal
result. :meth:`~SpendAnalyzer.process_many` handles several labeled inputs
independently; a data error in one input becomes that input's
:class:`~spend_analysis.report.ErrorNotice` and never affects the others.

The module-level :func:`process` and :func:`process_many` functions are thin
conveniences over a default-configured analyzer.
"""

from __future__ import annotations

from collections.abc import Iterable

from .aggregator import aggregate
from .classifier import classify
from .errors import SpendAnalysisError
from .logging_setup import get_logger
from .models import (
    AnalysisPolicy,
    CategorySummary,
    ClassifiedLedger,
    LabeledInput,
    LabeledInputs,
    TransactionRecord,
)
from .parser import parse_transactions
from .pmap import p_map
from .report import CategoryReport, ErrorNotice, InputReport, render
from .rules import CategoryRuleSet, default_rule_set

_logger = get_logger("spend_analysis.api")


class SpendAnalyzer:
    """Configured parse → classify → aggregate → render pipeline.

    Instances hold only immutable configuration, so one analyzer may be
    shared across threads and reused for any number of inputs.
    """

    __slots__ = ("_rule_set", "_policy")

    def __init__(
        self,
        rule_set: CategoryRuleSet | None = None,
        policy: AnalysisPolicy | None = None,
    ) -> None:
        self._rule_set = rule_set if rule_set is not None else default_rule_set()
        self._policy = policy if policy is not None else AnalysisPolicy()

    def __repr__(self) -> str:
        return (
            f"SpendAnalyzer(categories={len(self._rule_set)}, "
            f"fallback={self._rule_set.fallback!r}, policy={self._policy!r})"
        )

    @property
    def rule_set(self) -> CategoryRuleSet:
        return self._rule_set

    @property
    def policy(self) -> AnalysisPolicy:
        return self._policy

    # ---- Pipeline stages -------------------------------------------------

    def parse(self, csv_text: str) -> list[TransactionRecord]:
        return parse_transactions(csv_text, exclude_type=self._policy.exclude_type)

    def classify(self, records: Iterable[TransactionRecord]) -> ClassifiedLedger:
        return classify(records, self._rule_set, exclusive_match=self._policy.exclusive_match)

    def aggregate(self, ledger: ClassifiedLedger) -> list[CategorySummary]:
        return aggregate(ledger, category_order=self._policy.category_order)

    def render(self, summaries: Iterable[CategorySummary]) -> list[CategoryReport]:
        return render(summaries, round_totals=self._policy.round_totals)

    # ---- Whole pipeline --------------------------------------------------

    def process(self, csv_text: str) -> list[CategoryReport]:
        """Run the full pipeline for one CSV text.

        Raises :class:`~spend_analysis.errors.SpendAnalysisError` subclasses on
        malformed input; nothing partial is returned in that case.
        """

        return self.render(self.aggregate(self.classify(self.parse(csv_text))))

    def process_input(self, index: int, item: LabeledInput) -> InputReport:
        """Process one labeled input, converting data errors into a notice."""

        try:
            categories = self.process(item.text)
        except SpendAnalysisError as exc:
            _logger.warning("input #%d (%s) failed: %s", index, item.label, exc)
            return InputReport(index=index, label=item.label, error=ErrorNotice.from_error(exc))
        return InputReport(index=index, label=item.label, categories=tuple(categories))

    def process_many(
        self, inputs: LabeledInputs, *, concurrency: int = 1
    ) -> list[InputReport]:
        """Process independent inputs; reports come back in input order.

        ``concurrency`` bounds the number of inputs processed at once. Results
        are identical for any value.
        """

        items = list(enumerate(inputs))
        reports = p_map(
            items, lambda pair: self.process_input(*pair), concurrency=concurrency
        )
        failed = sum(1 for r in reports if not r.ok)
        _logger.info("processed %d inputs (%d failed)", len(reports), failed)
        return reports


# ---- Module-level conveniences ------------------------------------------------


def process(
    csv_text: str,
    *,
    rule_set: CategoryRuleSet | None = None,
    policy: AnalysisPolicy | None = None,
) -> list[CategoryReport]:
    """Process one CSV text with the given (or default) rules and policy."""

    return SpendAnalyzer(rule_set, policy).process(csv_text)


def process_many(
    inputs: LabeledInputs,
    *,
    rule_set: CategoryRuleSet | None = None,
    policy: AnalysisPolicy | None = None,
    concurrency: int = 1,
) -> list[InputReport]:
    """Process several labeled inputs independently, preserving input order."""

    return SpendAnalyzer(rule_set, policy).process_many(inputs, concurrency=concurrency)


__all__ = ["SpendAnalyzer", "process", "process_many"]
