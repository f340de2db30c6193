"""Result rendering: JSON and CSV on stdout, Rich tables on stderr.

Commands hand over dicts or pydantic models; everything is flattened to
JSON-compatible rows first so the three formats agree on values.
"""

from __future__ import annotations

import csv
import json
import sys
from enum import Enum
from typing import Any, Sequence

from pydantic import BaseModel
from rich.console import Console
from rich.table import Table

console = Console(stderr=True)

Rows = Sequence[dict[str, Any] | BaseModel] | dict[str, Any] | BaseModel

# Row values that get highlighted in tables
_STATUS_STYLES = {"FAILED": "red", "OK": "green"}


class OutputFormat(str, Enum):
    TABLE = "table"
    JSON = "json"
    CSV = "csv"


def to_rows(data: Rows) -> list[dict[str, Any]]:
    """Normalize a dict, a model, or a list of either into a list of dicts."""
    items = [data] if isinstance(data, (dict, BaseModel)) else data
    return [
        item.model_dump(mode="json") if isinstance(item, BaseModel) else dict(item)
        for item in items
    ]


def print_output(
    data: Rows,
    fmt: OutputFormat = OutputFormat.TABLE,
    columns: list[str] | None = None,
    title: str | None = None,
) -> None:
    """Render ``data`` in the requested format.

    ``columns`` restricts table and CSV output; JSON always carries every
    field. A single dict or model is emitted as a JSON object, a sequence as
    a JSON array.
    """
    rows = to_rows(data)
    if fmt is OutputFormat.JSON:
        single = isinstance(data, (dict, BaseModel))
        print_json(rows[0] if single else rows)
    elif fmt is OutputFormat.CSV:
        print_csv(rows, columns)
    else:
        print_table(rows, columns, title)


def print_json(data: Any) -> None:
    json.dump(data, sys.stdout, indent=2, default=str)
    sys.stdout.write("\n")


def print_table(
    rows: list[dict[str, Any]],
    columns: list[str] | None = None,
    title: str | None = None,
) -> None:
    """Rich table on stderr; FAILED/OK rows of a migration report are colored."""
    if not rows:
        console.print("[dim]No results.[/dim]")
        return

    names = _columns(rows, columns)
    table = Table(title=title)
    for name in names:
        table.add_column(name, overflow="fold")
    for row in rows:
        table.add_row(
            *(_cell(row.get(name)) for name in names),
            style=_STATUS_STYLES.get(str(row.get("status"))),
        )
    console.print(table)


def print_csv(rows: list[dict[str, Any]], columns: list[str] | None = None) -> None:
    if not rows:
        return
    fieldnames = _columns(rows, columns)
    writer = csv.DictWriter(sys.stdout, fieldnames=fieldnames, extrasaction="ignore", lineterminator="\n")
    writer.writeheader()
    writer.writerows({name: _cell(row.get(name)) for name in fieldnames} for row in rows)


def _columns(rows: list[dict[str, Any]], columns: list[str] | None) -> list[str]:
    return columns if columns is not None else list(rows[0])


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    return str(value)
