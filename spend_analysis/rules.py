"""Category rules: ordered ``(identifier, patterns)`` pairs loaded from JSON.

The rule table is configuration data, not code. The packaged default lives in
``spend_analysis/data/category_rules.v1.json``; callers may point at their own
file (same shape) via :func:`load_rule_set` or ``$SPEND_ANALYSIS_RULES_PATH``.

File shape::

    {
      "schema_version": 1,
      "fallback": "Uncategorised",
      "categories": [
        {"identifier": "Cars", "patterns": ["PORSCHE", "GEICO"]},
        ...
      ]
    }

Declaration order matters twice: it breaks ties when exclusive matching picks
the first matching category, and it is the default display order. The
fallback category may be declared (with no patterns) to pin its display
position; otherwise it sorts after every declared category.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import cache
from importlib import resources
from os import PathLike
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .errors import RuleConfigError
from .logging_setup import get_logger

SCHEMA_VERSION: int = 1
DEFAULT_FALLBACK = "Uncategorised"
DEFAULT_RULES_RESOURCE = "category_rules.v1.json"

_logger = get_logger("spend_analysis.rules")


# ---------------------------------------------------------------------------
# Rule DTOs
# ---------------------------------------------------------------------------


class CategoryRule(BaseModel):
    """One category and its case-insensitive substring patterns."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    identifier: str
    patterns: tuple[str, ...] = ()

    @field_validator("identifier")
    @classmethod
    def _identifier_non_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("identifier must be non-empty")
        return v

    @field_validator("patterns")
    @classmethod
    def _patterns_non_empty(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        # Internal whitespace is significant ("BART-DALY CITY     QPS"); only
        # all-blank patterns are rejected because they would match everything.
        for p in v:
            if not p.strip():
                raise ValueError("patterns must be non-empty strings")
        return v


class RuleFile(BaseModel):
    """Top-level schema of a rule JSON file."""

    model_config = ConfigDict(extra="forbid")

    schema_version: int
    fallback: str = DEFAULT_FALLBACK
    categories: list[CategoryRule]

    @field_validator("schema_version")
    @classmethod
    def _known_version(cls, v: int) -> int:
        if v != SCHEMA_VERSION:
            raise ValueError(f"unsupported schema_version {v} (expected {SCHEMA_VERSION})")
        return v


# ---------------------------------------------------------------------------
# Rule set
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CategoryRuleSet:
    """Immutable, ordered rule table plus the fallback bucket identifier."""

    rules: tuple[CategoryRule, ...]
    fallback: str = DEFAULT_FALLBACK
    # Case-folded patterns per rule, computed once for the classifier.
    folded: tuple[tuple[str, tuple[str, ...]], ...] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        rules = tuple(self.rules)
        object.__setattr__(self, "rules", rules)

        fallback = self.fallback.strip()
        if not fallback:
            raise RuleConfigError("fallback identifier must be non-empty")
        object.__setattr__(self, "fallback", fallback)

        seen: set[str] = set()
        for rule in rules:
            if rule.identifier in seen:
                raise RuleConfigError(f"duplicate category identifier: {rule.identifier!r}")
            seen.add(rule.identifier)
            if rule.identifier == fallback and rule.patterns:
                raise RuleConfigError(
                    f"fallback category {fallback!r} must not declare patterns"
                )

        object.__setattr__(
            self,
            "folded",
            tuple(
                (r.identifier, tuple(p.casefold() for p in r.patterns))
                for r in rules
                if r.identifier != fallback
            ),
        )

    @property
    def identifiers(self) -> tuple[str, ...]:
        """Every category in display order, fallback included exactly once."""

        ids = tuple(r.identifier for r in self.rules)
        return ids if self.fallback in ids else ids + (self.fallback,)

    def __len__(self) -> int:
        return len(self.rules)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def parse_rule_set(text: str, *, source: str = "<string>") -> CategoryRuleSet:
    """Validate rule JSON text and build a :class:`CategoryRuleSet`."""

    try:
        data = RuleFile.model_validate_json(text)
    except ValidationError as exc:
        raise RuleConfigError(f"invalid rule file {source}: {exc}") from exc
    rule_set = CategoryRuleSet(rules=tuple(data.categories), fallback=data.fallback)
    _logger.debug("loaded %d category rules from %s", len(rule_set), source)
    return rule_set


def load_rule_set(path: str | PathLike[str]) -> CategoryRuleSet:
    """Read a rule JSON file from ``path``.

    ``OSError`` (missing file, permissions) propagates unchanged; content
    problems raise :class:`RuleConfigError`.
    """

    p = Path(path)
    return parse_rule_set(p.read_text(encoding="utf-8"), source=str(p))


@cache
def default_rule_set() -> CategoryRuleSet:
    """Return the packaged rule table (loaded once and shared)."""

    text = (
        resources.files("spend_analysis")
        .joinpath("data", DEFAULT_RULES_RESOURCE)
        .read_text(encoding="utf-8")
    )
    return parse_rule_set(text, source=f"spend_analysis/data/{DEFAULT_RULES_RESOURCE}")


def dump_rule_set(rule_set: CategoryRuleSet) -> str:
    """Serialize a rule set back to the JSON file shape."""

    payload = RuleFile(
        schema_version=SCHEMA_VERSION,
        fallback=rule_set.fallback,
        categories=list(rule_set.rules),
    )
    return json.dumps(payload.model_dump(mode="json"), indent=2, ensure_ascii=False)


__all__ = [
    "CategoryRule",
    "CategoryRuleSet",
    "RuleFile",
    "DEFAULT_FALLBACK",
    "default_rule_set",
    "dump_rule_set",
    "load_rule_set",
    "parse_rule_set",
]
