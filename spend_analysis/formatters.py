"""Serializers for rendered reports: HTML fragments, plain text and JSON.

HTML output is a sequence of per-category fragments::

    <h2>Restaurants, 5</h2>
    <span style="color:#ff8c00">Sale</span>, 2019-01-02, -4.50, STARBUCKS #123<br/>

No ``<html>``/``<body>`` wrapper is emitted; composing fragments from several
inputs into a page belongs to the caller. All text is HTML-escaped.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from html import escape

from .report import CategoryReport, ErrorNotice, InputReport, ReportEntry


def _entry_line(entry: ReportEntry) -> str:
    return (
        f'<span style="color:{entry.style.color}">{escape(entry.type)}</span>'
        f", {entry.transaction_date.isoformat()}"
        f", {entry.amount}"
        f", {escape(entry.description)}<br/>"
    )


def category_to_html(category: CategoryReport) -> str:
    lines = [f"<h2>{escape(category.identifier)}, {category.total}</h2>"]
    lines.extend(_entry_line(e) for e in category.entries)
    return "\n".join(lines)


def to_html(categories: Iterable[CategoryReport]) -> str:
    """Concatenate per-category HTML fragments in report order."""

    return "\n".join(category_to_html(c) for c in categories)


def error_to_html(notice: ErrorNotice) -> str:
    return f'<p class="error">{escape(notice.describe())}</p>'


def input_to_html(report: InputReport) -> str:
    """Fragment for one input: its categories, or its error notice."""

    if report.error is not None:
        return error_to_html(report.error)
    return to_html(report.categories)


def to_text(categories: Iterable[CategoryReport]) -> str:
    """Plain-text rendering: a header per category and indented entries."""

    out: list[str] = []
    for c in categories:
        out.append(f"{c.identifier}, {c.total}")
        for e in c.entries:
            out.append(f"  {e.type}, {e.transaction_date.isoformat()}, {e.amount}, {e.description}")
    return "\n".join(out)


def to_json(reports: Sequence[InputReport], *, indent: int | None = 2) -> str:
    """JSON array of input reports using the camelCase field names."""

    payload = [r.model_dump(mode="json", by_alias=True) for r in reports]
    return json.dumps(payload, indent=indent, ensure_ascii=False)


__all__ = [
    "category_to_html",
    "error_to_html",
    "input_to_html",
    "to_html",
    "to_json",
    "to_text",
]
