"""Public interface for the ``spend_analysis`` package.

This module only re-exports the stable import surface; there is no runtime
logic here.
"""

from .aggregator import aggregate
from .api import SpendAnalyzer, process, process_many
from .classifier import classify, matching_categories
from .errors import (
    AmountParseError,
    DateParseError,
    MalformedInputError,
    RuleConfigError,
    SpendAnalysisError,
)
from .models import (
    AnalysisPolicy,
    CategoryOrder,
    CategorySummary,
    ClassifiedLedger,
    LabeledInput,
    TransactionRecord,
)
from .parser import parse_transactions
from .report import CategoryReport, ErrorNotice, InputReport, ReportEntry, TypeStyle, render
from .rules import CategoryRule, CategoryRuleSet, default_rule_set, load_rule_set

__all__ = [
    # API
    "SpendAnalyzer",
    "process",
    "process_many",
    # Pipeline stages
    "parse_transactions",
    "classify",
    "matching_categories",
    "aggregate",
    "render",
    # Rules
    "CategoryRule",
    "CategoryRuleSet",
    "default_rule_set",
    "load_rule_set",
    # Models / types
    "AnalysisPolicy",
    "CategoryOrder",
    "CategorySummary",
    "ClassifiedLedger",
    "LabeledInput",
    "TransactionRecord",
    "CategoryReport",
    "ReportEntry",
    "ErrorNotice",
    "InputReport",
    "TypeStyle",
    # Errors
    "SpendAnalysisError",
    "MalformedInputError",
    "DateParseError",
    "AmountParseError",
    "RuleConfigError",
]
