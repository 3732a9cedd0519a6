"""
Preprocessing Transforms Module

Row-level transforms for each preprocessing stage: infinite-value cleanup,
missing-value handling, categorical encoding and normalization. Every
transform reads a Dataset snapshot and returns new rows; input rows are never
modified.

Label and one-hot encodings order categories by the sorted string form of the
values (scikit-learn ``LabelEncoder``), so the codes do not depend on row order.
"""

import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
from loguru import logger
from sklearn.preprocessing import LabelEncoder, MinMaxScaler, StandardScaler

from analysis import Analysis, ColumnScan, Dataset, NumericProfile
from analysis.dataset import is_infinite, is_missing, parse_number, to_native

from .methods import EncodingMethod, MissingValueMethod, NormalizationMethod


@dataclass
class TransformOutcome:
    """New rows produced by a transform, with how much it touched."""

    rows: List[Dict[str, Any]]
    columns: List[str]
    affected: int
    affected_columns: List[str] = field(default_factory=list)
    encoded_columns: Optional[List[str]] = None


def replace_infinite(dataset: Dataset, columns: Sequence[str]) -> TransformOutcome:
    """
    Replace +/-Infinity with a missing cell in the given columns.

    Args:
        dataset: Snapshot to clean
        columns: Numeric columns to clean

    Returns:
        TransformOutcome; ``affected`` is the number of cells replaced
    """
    targets = set(columns)
    replaced = Counter()
    rows = []
    for row in dataset.rows:
        new_row = dict(row)
        for column in targets:
            if is_infinite(new_row.get(column)):
                new_row[column] = None
                replaced[column] += 1
        rows.append(new_row)

    logger.debug("Replaced infinite values: {}", dict(replaced))
    return TransformOutcome(
        rows=rows,
        columns=list(dataset.columns),
        affected=sum(replaced.values()),
        affected_columns=[c for c in dataset.columns if replaced[c]],
    )


def _most_frequent(scan: ColumnScan, numeric_only: bool) -> Any:
    """Most frequent non-missing value, ties in first-seen order."""
    for value, _ in scan.frequencies():
        if not numeric_only:
            return value
        number = parse_number(value)
        if number is not None and math.isfinite(number):
            return value
    return None


def _fill_value(
    method: MissingValueMethod, profile: NumericProfile, scan: ColumnScan
) -> Optional[Any]:
    """Replacement for missing cells of a numeric column, from the unfilled data."""
    if method is MissingValueMethod.FILL_ZERO:
        return 0

    if method is MissingValueMethod.FILL_MODE:
        return _most_frequent(scan, numeric_only=True)

    finite = scan.finite_numbers
    if len(finite) == 0:
        return None

    if profile.stats is None:
        # a single finite value is its own mean and median
        return float(finite[0])

    if method is MissingValueMethod.FILL_MEAN:
        return profile.stats.mean
    if method is MissingValueMethod.FILL_MEDIAN:
        return profile.stats.median

    raise ValueError(f"Unknown fill method: {method}")


def fill_missing(dataset: Dataset, fill_values: Dict[str, Any]) -> TransformOutcome:
    """Replace missing cells of each column in ``fill_values`` with its value."""
    filled = Counter()
    rows = []
    for row in dataset.rows:
        new_row = dict(row)
        for column, value in fill_values.items():
            if is_missing(new_row.get(column)):
                new_row[column] = value
                filled[column] += 1
        rows.append(new_row)

    return TransformOutcome(
        rows=rows,
        columns=list(dataset.columns),
        affected=sum(filled.values()),
        affected_columns=[c for c in dataset.columns if filled[c]],
    )


def handle_missing_values(
    dataset: Dataset, method: MissingValueMethod, analysis: Analysis
) -> TransformOutcome:
    """
    Handle missing cells.

    ``dropRows`` removes rows with any missing cell and ``dropColumns`` removes
    columns with any missing cell. The ``fill*`` methods replace missing cells
    of numeric columns with the mean, median, most frequent value or zero,
    computed before filling.

    Args:
        dataset: Snapshot to clean
        method: Missing value method
        analysis: Analysis of ``dataset``

    Returns:
        TransformOutcome; ``affected`` counts removed rows, removed columns or
        filled cells depending on the method
    """
    if method is MissingValueMethod.DROP_ROWS:
        rows = [
            dict(row)
            for row in dataset.rows
            if not any(is_missing(row.get(c)) for c in dataset.columns)
        ]
        removed = dataset.row_count - len(rows)
        logger.info("Dropped {} rows with missing values", removed)
        return TransformOutcome(rows=rows, columns=list(dataset.columns), affected=removed)

    if method is MissingValueMethod.DROP_COLUMNS:
        keep = [c for c in dataset.columns if analysis.columns[c].missing_count == 0]
        dropped = [c for c in dataset.columns if c not in keep]
        rows = [{c: row.get(c) for c in keep} for row in dataset.rows]
        logger.info("Dropped {} columns with missing values: {}", len(dropped), dropped)
        return TransformOutcome(
            rows=rows, columns=keep, affected=len(dropped), affected_columns=dropped
        )

    fill_values = {}
    for column in analysis.numeric_columns:
        profile = analysis.columns[column]
        if profile.missing_count == 0:
            continue

        value = _fill_value(method, profile, dataset.scan(column))
        if value is None:
            logger.warning("No values to compute {} for column {}, leaving it unfilled", method.value, column)
            continue
        fill_values[column] = to_native(value)

    outcome = fill_missing(dataset, fill_values)
    logger.info("Filled {} missing values in {} columns", outcome.affected, len(outcome.affected_columns))
    return outcome


def fill_with_mode(dataset: Dataset, columns: Sequence[str]) -> TransformOutcome:
    """Replace missing cells of ``columns`` with each column's most frequent value."""
    fill_values = {}
    for column in columns:
        scan = dataset.scan(column)
        if scan.missing_count == 0:
            continue
        value = _most_frequent(scan, numeric_only=False)
        if value is not None:
            fill_values[column] = to_native(value)
    return fill_missing(dataset, fill_values)


def _fit_categories(values: List[Any]) -> List[str]:
    """Sorted distinct string forms of the non-missing values."""
    present = [str(v) for v in values if not is_missing(v)]
    if not present:
        return []
    encoder = LabelEncoder()
    encoder.fit(present)
    return [str(c) for c in encoder.classes_]


def encode_categorical(
    dataset: Dataset, method: EncodingMethod, columns: Sequence[str]
) -> TransformOutcome:
    """
    Encode categorical columns.

    ``label`` replaces each value with its integer code; missing cells stay
    missing. ``onehot`` replaces each column with one 0/1 column per category,
    named ``{column}_{category}`` and placed where the original column was;
    rows with a missing value get 0 in every indicator column.

    Args:
        dataset: Snapshot to encode
        method: Encoding method
        columns: Categorical columns to encode

    Returns:
        TransformOutcome; ``affected`` is the number of columns encoded and
        ``encoded_columns`` the full set of encoding-produced columns
    """
    requested = set(columns)
    targets = [c for c in dataset.columns if c in requested]
    categories = {c: _fit_categories(dataset.column_values(c)) for c in targets}

    if method is EncodingMethod.LABEL:
        codes = {c: {cat: i for i, cat in enumerate(cats)} for c, cats in categories.items()}
        rows = []
        for row in dataset.rows:
            new_row = dict(row)
            for column in targets:
                value = row.get(column)
                new_row[column] = None if is_missing(value) else codes[column][str(value)]
            rows.append(new_row)

        new_columns = list(dataset.columns)
        generated = list(targets)

    elif method is EncodingMethod.ONEHOT:
        indicator_names = {c: [f"{c}_{cat}" for cat in cats] for c, cats in categories.items()}

        new_columns = []
        for column in dataset.columns:
            new_columns.extend(indicator_names.get(column, [column]))
        if len(set(new_columns)) != len(new_columns):
            raise ValueError("One-hot encoding would produce duplicate column names")

        rows = []
        for row in dataset.rows:
            new_row = {}
            for column in dataset.columns:
                if column not in indicator_names:
                    new_row[column] = row.get(column)
                    continue
                value = row.get(column)
                current = None if is_missing(value) else str(value)
                for cat, name in zip(categories[column], indicator_names[column]):
                    new_row[name] = 1 if cat == current else 0
            rows.append(new_row)

        generated = [name for names in indicator_names.values() for name in names]

    else:
        raise ValueError(f"Unknown encoding method: {method}")

    encoded = set(dataset.encoded_columns) | set(generated)
    encoded_columns = [c for c in new_columns if c in encoded]
    logger.info("Applied {} encoding to {} columns", method.value, len(targets))

    return TransformOutcome(
        rows=rows,
        columns=new_columns,
        affected=len(targets),
        affected_columns=targets,
        encoded_columns=encoded_columns,
    )


def normalize(
    dataset: Dataset, method: NormalizationMethod, columns: Sequence[str]
) -> TransformOutcome:
    """
    Rescale numeric columns.

    ``minmax`` maps finite values to [0, 1]; ``standard`` maps them to zero mean
    and unit (population) variance. A column whose finite values are all equal
    becomes 0. Missing and non-numeric cells are left as they are.

    Args:
        dataset: Snapshot to normalize
        method: Normalization method
        columns: Numeric columns to rescale

    Returns:
        TransformOutcome; ``affected`` is the number of values rescaled
    """
    if method is NormalizationMethod.MINMAX:
        scaler_cls = MinMaxScaler
    elif method is NormalizationMethod.STANDARD:
        scaler_cls = StandardScaler
    else:
        raise ValueError(f"Unknown normalization method: {method}")

    scaled: Dict[str, Dict[int, float]] = {}
    for column in columns:
        numbers = dataset.scan(column).numbers
        finite = np.isfinite(numbers)
        if not finite.any():
            logger.warning("Column {} has no finite values, skipping normalization", column)
            continue

        values = numbers[finite]
        if np.ptp(values) == 0:
            result = np.zeros_like(values)
        else:
            result = scaler_cls().fit_transform(values.reshape(-1, 1)).ravel()

        scaled[column] = {int(i): float(v) for i, v in zip(np.flatnonzero(finite), result)}

    rows = []
    for i, row in enumerate(dataset.rows):
        new_row = dict(row)
        for column, column_values in scaled.items():
            if i in column_values:
                new_row[column] = column_values[i]
        rows.append(new_row)

    affected = sum(len(v) for v in scaled.values())
    logger.info("Applied {} normalization to {} columns", method.value, len(scaled))

    return TransformOutcome(
        rows=rows,
        columns=list(dataset.columns),
        affected=affected,
        affected_columns=list(scaled),
    )
