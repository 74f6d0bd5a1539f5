"""Rich and JSON rendering of selected event logs."""

from __future__ import annotations

from collections.abc import Sequence

import orjson
from rich.console import Console
from rich.table import Table

from .discovery.schemas import LogDescriptor

TABLE_ROW_STYLES = ["white", "yellow"]


def render_selected_event_logs(selected: Sequence[LogDescriptor], console: Console) -> None:
    """Render the final selection as a table in hand-off order."""
    if not selected:
        console.print("No event logs selected.")
        return

    table = Table(title="Selected Event Logs", show_footer=True, footer_style="bold", title_justify="left")
    table.add_column("#", footer="Total", justify="right")
    table.add_column("Event Log", footer=str(len(selected)), justify="left", overflow="fold")
    table.add_column("Modified (UTC)", justify="left")

    for index, descriptor in enumerate(selected, start=1):
        style = TABLE_ROW_STYLES[(index - 1) % len(TABLE_ROW_STYLES)]
        table.add_row(
            str(index),
            str(descriptor.path),
            descriptor.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            style=style,
        )

    console.print(table)


def dump_selected_event_logs(selected: Sequence[LogDescriptor]) -> bytes:
    """Serialize the selection as a JSON array of `{path, timestamp}` objects."""
    return orjson.dumps(
        [{"path": str(descriptor.path), "timestamp": descriptor.timestamp} for descriptor in selected],
        option=orjson.OPT_INDENT_2,
    )
