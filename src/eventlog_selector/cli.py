"""CLI entrypoints for event log selection."""

from __future__ import annotations

import logging

import typer
from rich.console import Console

from .config import DEFAULT_HEADER_ROW_LIMIT, DEFAULT_TIMEOUT_SECONDS, SelectionSettings, default_pool_size
from .discovery.schemas import LogDescriptor
from .errors import ConfigurationError
from .render import dump_selected_event_logs, render_selected_event_logs
from .schemas import SelectionCounters
from .selection.criteria import build_filter_policy
from .service import SelectionService

LOGGER = logging.getLogger(__name__)

TYPER_APP = typer.Typer(help="Select application event logs for profiling.")


@TYPER_APP.callback()
def main() -> None:
    """Root CLI callback."""


@TYPER_APP.command("select")
def select_command(
    paths: list[str] = typer.Argument(
        ...,
        help="Event log files, directories, or glob patterns; append @<int><unit> (e.g. @2d) for a time window.",
    ),
    filter_criteria: str | None = typer.Option(
        None,
        "--filter-criteria",
        "-f",
        help="Keep the N newest or oldest applications by start time, e.g. '20-newest' or '5-oldest'.",
    ),
    match_event_logs: str | None = typer.Option(
        None,
        "--match-event-logs",
        "-m",
        help="Keep applications whose name contains this substring; prefix with '~' to exclude them instead.",
    ),
    start_app_time: str | None = typer.Option(
        None,
        "--start-app-time",
        "-s",
        help="Keep applications started within this period, e.g. '12h' or '5d' (units: min, h, d, w, m).",
    ),
    num_threads: int = typer.Option(
        default_pool_size(),
        "--num-threads",
        "-n",
        help="Number of worker threads scanning event log headers.",
    ),
    timeout: int = typer.Option(
        DEFAULT_TIMEOUT_SECONDS,
        "--timeout",
        "-t",
        help="Maximum seconds to spend scanning event log headers.",
    ),
    header_rows: int = typer.Option(
        DEFAULT_HEADER_ROW_LIMIT,
        "--header-rows",
        help="Maximum lines read from each event log while looking for its application header.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the selection as a JSON array."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable info-level logging."),
) -> None:
    """Discover event logs, read their headers, and print the selected ones in order."""
    _configure_logging(verbose)
    try:
        policy = build_filter_policy(
            filter_criteria=filter_criteria,
            match_app_name=match_event_logs,
            start_app_time=start_app_time,
        )
        settings = SelectionSettings(header_row_limit=header_rows, pool_size=num_threads, timeout_seconds=timeout)
        settings.validate()
    except ConfigurationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    LOGGER.info("Start selecting event logs from %d path specifier(s).", len(paths))
    service = SelectionService(settings)
    outcome = service.run(paths, policy, consumer=lambda selected: _emit_selection(selected, as_json))
    LOGGER.info("Finished selecting event logs.")

    if verbose:
        _emit_summary(outcome.counters)


def _configure_logging(verbose: bool) -> None:
    """Initialize default logging for CLI usage."""
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="[%(asctime)s][%(levelname)s][%(name)s] %(message)s",
    )


def _emit_selection(selected: list[LogDescriptor], as_json: bool) -> None:
    """Print the selection to stdout."""
    if as_json:
        typer.echo(dump_selected_event_logs(selected).decode("utf-8"))
        return
    render_selected_event_logs(selected, Console())


def _emit_summary(counters: SelectionCounters) -> None:
    """Print run counters to stderr so JSON output stays parseable."""
    summary_lines = [
        f"specifiers_total={counters.specifiers_total}",
        f"specifiers_without_logs={counters.specifiers_without_logs}",
        f"logs_discovered={counters.logs_discovered}",
        f"logs_scanned={counters.logs_scanned}",
        f"logs_unscanned={counters.logs_unscanned}",
        f"headers_missing={counters.headers_missing}",
        f"logs_selected={counters.logs_selected}",
    ]
    for line in summary_lines:
        typer.echo(line, err=True)


def module_cli_entry_point():
    TYPER_APP()
