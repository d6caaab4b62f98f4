"""ON CONFLICT clauses and multi-row INSERT ... RETURNING statements.

Statements use "?" placeholders; the values come back as a separate list.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional


@dataclass(frozen=True)
class UpExpr:
    """Assign the SQL expression ``expr`` to column ``name`` on conflict."""

    name: str
    expr: str


@dataclass
class OnConflict:
    columns: list[str] = field(default_factory=list)
    # (column, SQL expression) pairs in the order they are written.
    do_updates: list[tuple[str, str]] = field(default_factory=list)
    do_nothing: bool = False

    def to_sql(self) -> str:
        if self.do_nothing:
            return "ON CONFLICT DO NOTHING"
        keys = ", ".join(self.columns)
        updates = ", ".join(f"{column} = {value}" for column, value in self.do_updates)
        return f"ON CONFLICT ({keys}) DO UPDATE SET {updates}"


def on_conflict_update(key: str, *args: str) -> OnConflict:
    """Update the given columns from the new row when ``key`` conflicts."""
    return on_conflict_update_multi([key], *args)


def on_conflict_update_multi(keys: Iterable[str], *args: str) -> OnConflict:
    """Update the given columns from the new row when the key columns conflict."""
    return OnConflict(
        columns=list(keys),
        do_updates=[(column, f"excluded.{column}") for column in args],
    )


def on_conflict_do_update_expr(keys: Iterable[str], *args: UpExpr) -> OnConflict:
    """Assign expressions on conflict; a later expression for a column wins, columns sorted."""
    values = {expr.name: expr.expr for expr in args}
    return OnConflict(
        columns=list(keys),
        do_updates=[(name, values[name]) for name in sorted(values)],
    )


def _quote(name: str) -> str:
    return ".".join('"' + part.replace('"', '""') + '"' for part in name.split("."))


def _is_instance(obj: Any) -> bool:
    return dataclasses.is_dataclass(obj) and not isinstance(obj, type)


def _row_to_map(row: Any, now: datetime) -> dict[str, Any]:
    if isinstance(row, Mapping):
        return dict(row)
    if not _is_instance(row):
        raise TypeError("value must be kind of Struct")
    fields = dataclasses.fields(row)
    explicit_key = any(fld.metadata.get("primary_key") for fld in fields)
    attributes: dict[str, Any] = {}
    for fld in fields:
        meta = fld.metadata
        value = getattr(row, fld.name)
        if meta.get("foreign_key") or meta.get("ignore"):
            continue
        # The database fills in declared defaults.
        if "default" in meta:
            continue
        # Related records are not columns of this table.
        if _is_instance(value):
            continue
        column = meta.get("column", fld.name)
        primary = meta.get("primary_key", not explicit_key and column == "id")
        if column == "id" and primary:
            continue
        if fld.name in ("created_at", "updated_at"):
            attributes[column] = now
            continue
        attributes[column] = value
    return attributes


def build_bulk_insert(
    table: str, rows: Iterable[Any], on_conflict: Optional[OnConflict] = None
) -> Optional[tuple[str, list[Any]]]:
    """Statement and values inserting all ``rows``; None when there are no rows.

    Rows are dataclass instances or mappings of column to value. Columns are
    those of the first row, sorted by name.
    """
    if isinstance(rows, (str, bytes, Mapping)) or _is_instance(rows):
        raise TypeError("This method only works on slices")
    rows = list(rows)
    if not rows:
        return None
    now = datetime.now(timezone.utc)
    maps = [_row_to_map(row, now) for row in rows]
    columns = sorted(key for key in maps[0] if key != "")
    params = [values.get(column) for values in maps for column in columns]
    group = "(" + ", ".join(["?"] * len(columns)) + ")"
    groups = ", ".join([group] * len(maps))
    extra = on_conflict.to_sql() if on_conflict is not None else ""
    query = (
        f"INSERT INTO {_quote(table)} ({', '.join(_quote(c) for c in columns)}) "
        f"VALUES {groups} {extra} RETURNING *"
    )
    return query, params