"""Typer-based console interface for ``spend_analysis``.

Commands
--------
- ``report CSV_PATH...``: analyze one or more bank CSV exports and print one
  report per file, in argument order. A file that fails to read or parse is
  reported as an error in its slot; the others still render. ``--format``
  picks rich tables (``text``), unstyled lines for pipes and logs (``plain``),
  HTML fragments (``html``) or a JSON array (``json``).
- ``rules``: list the active category rules.

Defaults for every policy flag come from ``SPEND_ANALYSIS_*`` environment
variables (see :mod:`spend_analysis.config`); a ``.env`` in the working
directory is loaded first without overriding variables already set.
"""

from __future__ import annotations

from enum import StrEnum
from html import escape as html_escape
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from .api import SpendAnalyzer
from .config import max_workers_from_env, policy_from_env, rules_path_from_env
from .errors import RuleConfigError
from .formatters import input_to_html, to_json, to_text
from .logging_setup import configure_logging, get_logger
from .models import AnalysisPolicy, LabeledInput
from .pmap import p_map
from .report import CategoryReport, ErrorNotice, InputReport
from .rules import CategoryRuleSet, default_rule_set, dump_rule_set, load_rule_set

console = Console()
err_console = Console(stderr=True)

_logger = get_logger("spend_analysis.cli")


class OutputFormat(StrEnum):
    TEXT = "text"
    PLAIN = "plain"
    HTML = "html"
    JSON = "json"


class CategoryOrderChoice(StrEnum):
    DECLARED = "declared"
    SORTED = "sorted"


# ---- Helpers ------------------------------------------------------------------


def _load_rules(rules_path: Path | None) -> CategoryRuleSet:
    path = rules_path or rules_path_from_env()
    if path is None:
        return default_rule_set()
    try:
        return load_rule_set(path)
    except OSError as e:
        err_console.print(
            f"[red]Error:[/red] cannot read rule file {escape(str(path))}: {escape(str(e))}"
        )
        raise typer.Exit(1) from e
    except RuleConfigError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e


def _read_input(path: Path) -> LabeledInput | ErrorNotice:
    try:
        return LabeledInput(label=path.name, text=path.read_text(encoding="utf-8-sig"))
    except FileNotFoundError:
        return ErrorNotice(kind="FileReadError", message=f"file not found: {path}")
    except PermissionError:
        return ErrorNotice(kind="FileReadError", message=f"permission denied: {path}")
    except UnicodeDecodeError as e:
        return ErrorNotice(kind="FileReadError", message=f"not valid UTF-8: {path} ({e.reason})")
    except OSError as e:
        return ErrorNotice(kind="FileReadError", message=f"cannot read {path}: {e}")


def _category_table(category: CategoryReport) -> Table:
    table = Table(title=Text(f"{category.identifier}, {category.total}"), title_justify="left")
    table.add_column("Type")
    table.add_column("Date")
    table.add_column("Amount", justify="right")
    table.add_column("Description")
    for e in category.entries:
        table.add_row(
            Text(e.type, style=e.style.color),
            e.transaction_date.isoformat(),
            str(e.amount),
            Text(e.description),
        )
    return table


def _print_text(report: InputReport) -> None:
    console.rule(Text(f"File #{report.index} : {report.label}"))
    if report.error is not None:
        err_console.print(
            f"[red]Error:[/red] {escape(report.label)}: {escape(report.error.describe())}"
        )
        return
    if not report.categories:
        console.print("(no transactions)")
    for category in report.categories:
        console.print(_category_table(category))


def _emit(reports: list[InputReport], output: OutputFormat) -> None:
    if output is OutputFormat.JSON:
        typer.echo(to_json(reports))
        return
    if output is OutputFormat.PLAIN:
        for r in reports:
            typer.echo(f"File #{r.index} : {r.label}")
            if r.error is not None:
                typer.echo(f"Error: {r.error.describe()}")
            elif r.categories:
                typer.echo(to_text(r.categories))
            else:
                typer.echo("(no transactions)")
        return
    if output is OutputFormat.HTML:
        for r in reports:
            typer.echo(f"<h1>File #{r.index} : {html_escape(r.label)}</h1>")
            typer.echo(input_to_html(r))
        return
    for r in reports:
        _print_text(r)


# ---- Typer-based console interface ----------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Categorize bank CSV exports by description and summarize spend per category.",
)


@app.command("report")
def report_cmd(
    csv_paths: Annotated[
        list[Path], typer.Argument(help="One or more bank CSV exports", dir_okay=False)
    ],
    output: Annotated[
        OutputFormat, typer.Option("--format", "-f", help="Output format")
    ] = OutputFormat.TEXT,
    exclude_type: Annotated[
        str | None,
        typer.Option(help="Drop rows with this Type (e.g. Payment)."),
    ] = None,
    exclusive: Annotated[
        bool | None,
        typer.Option(
            "--exclusive/--non-exclusive",
            help="First matching category only, or every matching category.",
        ),
    ] = None,
    order: Annotated[
        CategoryOrderChoice | None, typer.Option("--order", help="Category display order")
    ] = None,
    round_totals: Annotated[
        bool | None,
        typer.Option("--round/--no-round", help="Round category totals to whole units."),
    ] = None,
    rules: Annotated[
        Path | None, typer.Option("--rules", help="JSON rule file replacing the packaged rules")
    ] = None,
    concurrency: Annotated[
        int | None, typer.Option(min=1, help="Number of files processed at once.")
    ] = None,
) -> None:
    """Analyze CSV exports and print a per-category report for each."""

    env_policy = policy_from_env()
    try:
        policy = AnalysisPolicy(
            exclude_type=exclude_type if exclude_type is not None else env_policy.exclude_type,
            exclusive_match=exclusive if exclusive is not None else env_policy.exclusive_match,
            category_order=order.value if order is not None else env_policy.category_order,
            round_totals=round_totals if round_totals is not None else env_policy.round_totals,
        )
    except ValueError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(2) from e

    analyzer = SpendAnalyzer(_load_rules(rules), policy)
    _logger.info("running %r over %d file(s)", analyzer, len(csv_paths))

    loaded = [_read_input(p) for p in csv_paths]

    def _one(pair: tuple[int, LabeledInput | ErrorNotice]) -> InputReport:
        idx, item = pair
        if isinstance(item, ErrorNotice):
            return InputReport(index=idx, label=csv_paths[idx].name, error=item)
        return analyzer.process_input(idx, item)

    workers = concurrency if concurrency is not None else max_workers_from_env(len(loaded))
    reports = p_map(list(enumerate(loaded)), _one, concurrency=workers)

    _emit(reports, output)
    if any(not r.ok for r in reports):
        raise typer.Exit(1)


@app.command("rules")
def rules_cmd(
    rules: Annotated[
        Path | None, typer.Option("--rules", help="JSON rule file replacing the packaged rules")
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the rule file as JSON")] = False,
) -> None:
    """List the active category rules in declaration order."""

    rule_set = _load_rules(rules)
    if as_json:
        typer.echo(dump_rule_set(rule_set))
        return

    table = Table(title=f"Category rules (fallback: {rule_set.fallback})", title_justify="left")
    table.add_column("#", justify="right")
    table.add_column("Category")
    table.add_column("Patterns", justify="right")
    patterns_by_id = {r.identifier: len(r.patterns) for r in rule_set.rules}
    for pos, ident in enumerate(rule_set.identifiers, start=1):
        table.add_row(str(pos), ident, str(patterns_by_id.get(ident, 0)))
    console.print(table)


@app.callback()
def _root(
    log_level: Annotated[
        str | None,
        typer.Option(help="Logging level (e.g. INFO). Env: SPEND_ANALYSIS_LOG_LEVEL"),
    ] = None,
) -> None:
    """Load ``.env`` and configure logging before any command runs."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)


if __name__ == "__main__":  # pragma: no cover - `python -m spend_analysis.cli`
    app()
