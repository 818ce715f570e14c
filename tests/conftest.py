"""Pytest configuration shared by the test suite.

The CLI and :mod:`spend_analysis.config` read ``SPEND_ANALYSIS_*`` variables
(and a ``.env`` in the working directory). To keep tests hermetic, every test
starts with those variables cleared and runs from its own temporary directory.
"""

from __future__ import annotations

import logging
import os
import textwrap
from pathlib import Path

import pytest

from spend_analysis import CategoryRule, CategoryRuleSet, logging_setup

DATA_DIR = Path(__file__).resolve().parent / "data"


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("SPEND_ANALYSIS_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def _reset_logging(monkeypatch: pytest.MonkeyPatch):
    """Undo ``configure_logging`` calls made by CLI invocations."""

    pkg_logger = logging.getLogger("spend_analysis")
    saved = (list(pkg_logger.handlers), pkg_logger.level, pkg_logger.propagate)
    monkeypatch.setattr(logging_setup, "_CONFIGURED", False)
    yield
    pkg_logger.handlers[:] = saved[0]
    pkg_logger.setLevel(saved[1])
    pkg_logger.propagate = saved[2]


@pytest.fixture
def data_dir() -> Path:
    return DATA_DIR


@pytest.fixture
def small_rules() -> CategoryRuleSet:
    """A compact rule table with one deliberate overlap (``AMAZON PRIME NOW``)."""

    return CategoryRuleSet(
        rules=(
            CategoryRule(identifier="Household", patterns=("Amazon Prime", "TARGET")),
            CategoryRule(identifier="Groceries", patterns=("Amazon Prime Now", "SAFEWAY")),
            CategoryRule(identifier="Restaurants", patterns=("STARBUCKS", "doordash")),
            CategoryRule(identifier="RideShare", patterns=("LYFT", "UBER")),
        ),
        fallback="Uncategorised",
    )


def csv_text(body: str) -> str:
    """Dedent a triple-quoted CSV literal, keeping a trailing newline."""

    return textwrap.dedent(body).lstrip("\n")
