"""Environment-driven defaults for the analyzer policy and rule file.

Environment variables (all optional):

- ``SPEND_ANALYSIS_RULES_PATH``: JSON rule file replacing the packaged table.
- ``SPEND_ANALYSIS_EXCLUDE_TYPE``: drop rows with this ``Type`` (e.g. ``Payment``).
- ``SPEND_ANALYSIS_EXCLUSIVE_MATCH``: ``1/true/yes`` or ``0/false/no``.
- ``SPEND_ANALYSIS_CATEGORY_ORDER``: ``declared`` or ``sorted``.
- ``SPEND_ANALYSIS_ROUND_TOTALS``: ``1/true/yes`` or ``0/false/no``.
- ``SPEND_ANALYSIS_MAX_WORKERS``: thread count for multi-input processing.

Unrecognised values fall back to the built-in default (with a warning) rather
than failing, mirroring how the CLI treats its other env toggles. The CLI
loads a ``.env`` from the working directory before reading these.
"""

from __future__ import annotations

import os
from pathlib import Path

from .logging_setup import get_logger
from .models import CATEGORY_ORDERS, AnalysisPolicy

RULES_PATH_ENV = "SPEND_ANALYSIS_RULES_PATH"
EXCLUDE_TYPE_ENV = "SPEND_ANALYSIS_EXCLUDE_TYPE"
EXCLUSIVE_MATCH_ENV = "SPEND_ANALYSIS_EXCLUSIVE_MATCH"
CATEGORY_ORDER_ENV = "SPEND_ANALYSIS_CATEGORY_ORDER"
ROUND_TOTALS_ENV = "SPEND_ANALYSIS_ROUND_TOTALS"
MAX_WORKERS_ENV = "SPEND_ANALYSIS_MAX_WORKERS"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}

_logger = get_logger("spend_analysis.config")


def env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    v = raw.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    _logger.warning("ignoring unrecognised %s=%r; using %s", name, raw, default)
    return default


def policy_from_env(base: AnalysisPolicy | None = None) -> AnalysisPolicy:
    """Build an :class:`AnalysisPolicy` from ``base`` overridden by the environment."""

    base = base or AnalysisPolicy()

    exclude_type = base.exclude_type
    raw_exclude = os.getenv(EXCLUDE_TYPE_ENV)
    if raw_exclude is not None and raw_exclude.strip():
        exclude_type = raw_exclude.strip()

    order = base.category_order
    raw_order = (os.getenv(CATEGORY_ORDER_ENV) or "").strip().lower()
    if raw_order:
        if raw_order in CATEGORY_ORDERS:
            order = raw_order  # type: ignore[assignment]
        else:
            _logger.warning("ignoring unrecognised %s=%r", CATEGORY_ORDER_ENV, raw_order)

    return AnalysisPolicy(
        exclude_type=exclude_type,
        exclusive_match=env_flag(EXCLUSIVE_MATCH_ENV, base.exclusive_match),
        category_order=order,
        round_totals=env_flag(ROUND_TOTALS_ENV, base.round_totals),
    )


def rules_path_from_env() -> Path | None:
    raw = os.getenv(RULES_PATH_ENV)
    if raw and raw.strip():
        return Path(raw.strip()).expanduser()
    return None


def max_workers_from_env(n_inputs: int) -> int:
    """Resolve a worker count for ``n_inputs`` independent inputs.

    Honors ``SPEND_ANALYSIS_MAX_WORKERS`` capped to ``n_inputs`` and 32;
    defaults to 1 (sequential).
    """

    raw = os.getenv(MAX_WORKERS_ENV)
    try:
        requested = int(raw) if raw else 1
    except ValueError:
        _logger.warning("ignoring non-integer %s=%r", MAX_WORKERS_ENV, raw)
        requested = 1
    return max(1, min(requested, n_inputs, 32))


__all__ = [
    "env_flag",
    "max_workers_from_env",
    "policy_from_env",
    "rules_path_from_env",
]
