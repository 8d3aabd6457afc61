"""Binding tables: the relational intermediate results of rule evaluation.

A binding table has named columns (variable names, without the leading
``?``) and an ordered list of rows. Each row binds every column to
exactly one BindingValue. Tables are immutable; joins and filters
return new tables.

Evaluation starts from the unit table (no columns, one empty row),
which is the identity of the natural join.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Iterator, Mapping, Sequence

from .arguments import BindingValue

__all__ = [
    "Row",
    "Record",
    "BindingTable",
]

logger = logging.getLogger(__name__)

# A row, aligned with the table's columns
Row = tuple[BindingValue, ...]

# A row viewed as column name -> value
Record = Mapping[str, BindingValue]


class BindingTable:
    """Ordered relation over variable columns."""

    __slots__ = ("_columns", "_index", "_rows")

    def __init__(
        self,
        columns: Sequence[str] = (),
        rows: Iterable[Sequence[BindingValue]] = (),
    ) -> None:
        """Create a table.

        Args:
            columns: Column (variable) names, unique
            rows: Rows aligned with columns

        Raises:
            ValueError: On duplicate columns or a row of the wrong width
        """
        self._columns: tuple[str, ...] = tuple(columns)
        if len(set(self._columns)) != len(self._columns):
            raise ValueError(f"Duplicate columns in binding table: {self._columns}")
        self._index = {name: i for i, name in enumerate(self._columns)}

        self._rows: list[Row] = []
        for row in rows:
            row = tuple(row)
            if len(row) != len(self._columns):
                raise ValueError(
                    f"Row width {len(row)} does not match columns {self._columns}"
                )
            self._rows.append(row)

    @classmethod
    def unit(cls) -> "BindingTable":
        """The table with no columns and a single empty row."""
        return cls((), [()])

    @classmethod
    def empty(cls, columns: Sequence[str] = ()) -> "BindingTable":
        return cls(columns, [])

    @classmethod
    def from_records(
        cls, columns: Sequence[str], records: Iterable[Record]
    ) -> "BindingTable":
        """Build a table from mappings that bind every column."""
        return cls(columns, (tuple(rec[c] for c in columns) for rec in records))

    @property
    def columns(self) -> tuple[str, ...]:
        return self._columns

    @property
    def rows(self) -> list[Row]:
        return list(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[dict[str, BindingValue]]:
        return self.records()

    def __contains__(self, column: str) -> bool:
        return column in self._index

    def __repr__(self) -> str:
        return f"BindingTable(columns={list(self._columns)}, rows={len(self._rows)})"

    def is_empty(self) -> bool:
        return not self._rows

    def records(self) -> Iterator[dict[str, BindingValue]]:
        """Iterate over rows as column -> value dictionaries."""
        for row in self._rows:
            yield dict(zip(self._columns, row))

    def column_values(self, column: str) -> list[BindingValue]:
        """Values of one column, in row order."""
        i = self._index[column]
        return [row[i] for row in self._rows]

    def row_set(self) -> set[frozenset[tuple[str, BindingValue]]]:
        """Rows as an order-independent set, for comparing tables."""
        return {frozenset(zip(self._columns, row)) for row in self._rows}

    def natural_join(self, other: "BindingTable") -> "BindingTable":
        """Join with another table on all shared columns.

        A combined row survives only if every shared column holds equal
        values on both sides. With no shared column every pair of rows
        survives (cartesian product). Output columns are this table's
        columns followed by the other table's remaining columns; rows
        keep left-then-right order.
        """
        shared = [c for c in self._columns if c in other._index]
        extra = [c for c in other._columns if c not in self._index]
        other_shared = [other._index[c] for c in shared]
        other_extra = [other._index[c] for c in extra]

        buckets: dict[tuple[BindingValue, ...], list[Row]] = {}
        for row in other._rows:
            key = tuple(row[i] for i in other_shared)
            buckets.setdefault(key, []).append(tuple(row[i] for i in other_extra))

        self_shared = [self._index[c] for c in shared]
        joined: list[Row] = []
        for row in self._rows:
            key = tuple(row[i] for i in self_shared)
            for tail in buckets.get(key, ()):
                joined.append(row + tail)

        logger.debug(
            f"Joined {len(self._rows)}x{len(other._rows)} rows on {shared or 'nothing'}"
            f" -> {len(joined)} rows"
        )
        return BindingTable(self._columns + tuple(extra), joined)

    def filter(self, predicate: Callable[[Record], bool]) -> "BindingTable":
        """Keep the rows whose record satisfies the predicate."""
        kept = [
            row for row in self._rows
            if predicate(dict(zip(self._columns, row)))
        ]
        return BindingTable(self._columns, kept)

    def project(self, columns: Sequence[str]) -> "BindingTable":
        """Restrict the table to a subset of its columns."""
        indexes = [self._index[c] for c in columns]
        return BindingTable(columns, (tuple(row[i] for i in indexes) for row in self._rows))
