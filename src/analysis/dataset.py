"""
Dataset Module

Immutable dataset snapshots built from row records, cell predicates shared by
every analysis component (missing, infinite, numeric, date) and the single-pass
per-column scan that feeds the profiler, correlation engine and quality auditor.

Example:
    >>> dataset = Dataset.from_records([{"a": 1, "b": "x"}, {"a": None, "b": "y"}])
    >>> dataset.columns
    ('a', 'b')
    >>> dataset.scan("a").missing_count
    1
"""

import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Dict, Hashable, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd


def is_missing(value: Any) -> bool:
    """Return True for None, empty strings, NaN and pandas NA/NaT."""
    if value is None or value is pd.NA or value is pd.NaT:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (float, np.floating)):
        return math.isnan(value)
    return False


def is_real_number(value: Any) -> bool:
    """Return True for int/float values (numpy included), excluding booleans."""
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, (int, float, np.integer, np.floating))


def is_infinite(value: Any) -> bool:
    """Return True for +inf/-inf numbers. Strings never count as infinite."""
    return is_real_number(value) and math.isinf(float(value))


def parse_number(value: Any) -> Optional[float]:
    """
    Parse a cell as a number.

    Real numbers are returned as floats, including +/-inf. Strings are parsed
    only when they denote a finite number.

    Returns:
        The parsed float, or None when the cell is missing or not numeric
    """
    if is_missing(value):
        return None
    if is_real_number(value):
        return float(value)
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def is_date_like(value: Any, formats: Sequence[str]) -> bool:
    """Return True for date/datetime objects or strings matching one of ``formats``."""
    if isinstance(value, (datetime, date)):
        return True
    if not isinstance(value, str):
        return False

    text = value.strip()
    for fmt in formats:
        try:
            datetime.strptime(text, fmt)
            return True
        except ValueError:
            continue
    return False


@dataclass(frozen=True)
class BoolKey:
    """Distinct-value key for booleans, which would otherwise equal 1 and 0."""

    value: bool


def value_key(value: Any) -> Hashable:
    """Key used to count distinct values; unhashable cells fall back to repr."""
    if isinstance(value, (bool, np.bool_)):
        return BoolKey(bool(value))
    try:
        hash(value)
    except TypeError:
        return repr(value)
    return value


def to_native(value: Any) -> Any:
    """Convert a cell for output: missing -> None, numpy scalars -> Python scalars."""
    if isinstance(value, BoolKey):
        return value.value
    if is_missing(value):
        return None
    if isinstance(value, np.generic):
        return value.item()
    return value


def infer_columns(rows: Iterable[Mapping[str, Any]]) -> Tuple[str, ...]:
    """
    Derive the column order from the rows.

    The first row fixes the order; columns first seen in later rows are
    appended in the order they appear.
    """
    seen: Dict[str, None] = {}
    for row in rows:
        for column in row.keys():
            if column not in seen:
                seen[column] = None
    return tuple(seen)


@dataclass
class ColumnScan:
    """Everything the analysis needs about one column, gathered in one pass."""

    name: str
    values: List[Any]
    missing_count: int
    counts: pd.Series
    numbers: np.ndarray
    infinite_count: int

    @property
    def row_count(self) -> int:
        return len(self.values)

    @property
    def present_count(self) -> int:
        return self.row_count - self.missing_count

    @property
    def unique_count(self) -> int:
        return len(self.counts)

    @property
    def finite_numbers(self) -> np.ndarray:
        """Parsed numbers excluding missing, non-numeric and infinite cells."""
        return self.numbers[np.isfinite(self.numbers)]

    def frequencies(self, limit: Optional[int] = None) -> List[Tuple[Any, int]]:
        """(value, count) pairs, most frequent first, ties in first-seen order."""
        counts = self.counts if limit is None else self.counts.iloc[:limit]
        return [(to_native(key), int(count)) for key, count in counts.items()]


def scan_column(name: str, values: List[Any]) -> ColumnScan:
    """Build a ColumnScan from the raw cell values of one column."""
    keys = []
    numbers = np.full(len(values), np.nan, dtype=float)
    missing_count = 0
    infinite_count = 0

    for i, value in enumerate(values):
        if is_missing(value):
            missing_count += 1
            continue

        keys.append(value_key(value))

        number = parse_number(value)
        if number is not None:
            numbers[i] = number
            if math.isinf(number):
                infinite_count += 1

    # value_counts without sorting keeps first-seen order; the stable sort keeps it among ties
    counts = (
        pd.Series(keys, dtype=object)
        .value_counts(sort=False, dropna=False)
        .sort_values(ascending=False, kind="stable")
    )

    return ColumnScan(
        name=name,
        values=values,
        missing_count=missing_count,
        counts=counts,
        numbers=numbers,
        infinite_count=infinite_count,
    )


@dataclass(frozen=True)
class Dataset:
    """
    Immutable snapshot of a tabular dataset.

    Holds the row records with a stable column order, plus provenance: the
    ordered preprocessing step log and the columns produced by encoding.
    Transforms never mutate a snapshot; they build a new one.
    """

    rows: Tuple[Dict[str, Any], ...]
    columns: Tuple[str, ...]
    steps: Tuple[str, ...] = field(default=())
    encoded_columns: Tuple[str, ...] = field(default=())

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping[str, Any]],
        columns: Optional[Sequence[str]] = None,
        steps: Sequence[str] = (),
        encoded_columns: Sequence[str] = (),
    ) -> "Dataset":
        """
        Create a snapshot from row records.

        Rows lacking a column hold a missing cell (None) for it.

        Args:
            records: Sequence of mappings from column name to cell value
            columns: Explicit column order; inferred from the rows when omitted
            steps: Preprocessing steps already applied
            encoded_columns: Columns produced by categorical encoding

        Returns:
            New Dataset
        """
        records = list(records)
        columns = tuple(columns) if columns is not None else infer_columns(records)
        rows = tuple({column: record.get(column) for column in columns} for record in records)
        return cls(
            rows=rows,
            columns=columns,
            steps=tuple(steps),
            encoded_columns=tuple(c for c in encoded_columns if c in columns),
        )

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.columns)

    def column_values(self, column: str) -> List[Any]:
        return [row.get(column) for row in self.rows]

    def scan(self, column: str) -> ColumnScan:
        return scan_column(column, self.column_values(column))

    def scan_columns(self) -> Dict[str, ColumnScan]:
        """Scan every column once, in column order."""
        return {column: self.scan(column) for column in self.columns}

    def derive(
        self,
        rows: Iterable[Mapping[str, Any]],
        columns: Optional[Sequence[str]] = None,
        step: Optional[str] = None,
        encoded_columns: Optional[Sequence[str]] = None,
    ) -> "Dataset":
        """
        Build the next snapshot from transformed rows.

        Args:
            rows: Transformed row records
            columns: New column order (defaults to this snapshot's columns)
            step: Step description appended to the log
            encoded_columns: New encoded-column provenance (defaults to current)

        Returns:
            New Dataset carrying the extended step log
        """
        steps = self.steps + ((step,) if step else ())
        return Dataset.from_records(
            rows,
            columns=self.columns if columns is None else columns,
            steps=steps,
            encoded_columns=self.encoded_columns if encoded_columns is None else encoded_columns,
        )

    def with_steps(self, steps: Sequence[str]) -> "Dataset":
        return replace(self, steps=tuple(steps))

    def to_records(self) -> List[Dict[str, Any]]:
        """Rows as plain dicts with missing cells written as None."""
        return [{column: to_native(row.get(column)) for column in self.columns} for row in self.rows]

    def to_frame(self) -> pd.DataFrame:
        """Rows as an object-dtype frame, so integers next to gaps stay integers."""
        return pd.DataFrame(self.to_records(), columns=list(self.columns), dtype=object)
