"""
Analysis Result Types

Tagged-variant column profiles and the aggregate Analysis value, with the
camelCase dictionary shape consumed by the UI layer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ColumnType(Enum):
    """Semantic column types assigned by the classifier."""

    NUMERIC = "numeric"
    CATEGORICAL = "categorical"
    DATETIME = "datetime"
    OTHER = "other"


def format_percent(part: int, whole: int) -> str:
    """Percentage with one decimal as a string; "0.0" when ``whole`` is zero."""
    if whole <= 0:
        return "0.0"
    return f"{part / whole * 100:.1f}"


@dataclass
class Stats:
    """Descriptive statistics of a numeric column's finite values."""

    count: int
    mean: float
    median: float
    min: float
    max: float
    std: float
    q1: float
    q3: float
    iqr: float
    outlier_count: int
    skewness: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "mean": self.mean,
            "median": self.median,
            "min": self.min,
            "max": self.max,
            "std": self.std,
            "q1": self.q1,
            "q3": self.q3,
            "iqr": self.iqr,
            "outlierCount": self.outlier_count,
            "skewness": self.skewness,
        }


@dataclass
class OutlierSummary:
    """Tukey fences and box-plot whiskers for one numeric column."""

    lower_fence: float
    upper_fence: float
    lower_whisker: float
    upper_whisker: float
    count: int
    percentage: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lowerFence": self.lower_fence,
            "upperFence": self.upper_fence,
            "lowerWhisker": self.lower_whisker,
            "upperWhisker": self.upper_whisker,
            "count": self.count,
            "percentage": self.percentage,
        }


@dataclass
class HistogramBin:
    """One equal-width histogram bin, ``[start, end)`` except the last."""

    start: float
    end: float
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"start": self.start, "end": self.end, "count": self.count}


@dataclass
class ColumnProfile:
    """Fields shared by every column variant."""

    name: str
    missing_count: int
    missing_percent: str
    unique_count: int

    column_type = ColumnType.OTHER

    def to_dict(self, include_visuals: bool = False) -> Dict[str, Any]:
        return {
            "type": self.column_type.value,
            "missing": self.missing_count,
            "missingPercent": self.missing_percent,
            "unique": self.unique_count,
            "stats": None,
        }


@dataclass
class NumericProfile(ColumnProfile):
    stats: Optional[Stats] = None
    outliers: Optional[OutlierSummary] = None
    histogram: List[HistogramBin] = field(default_factory=list)

    column_type = ColumnType.NUMERIC

    def to_dict(self, include_visuals: bool = False) -> Dict[str, Any]:
        result = super().to_dict()
        result["stats"] = self.stats.to_dict() if self.stats is not None else None
        if include_visuals:
            result["histogram"] = [b.to_dict() for b in self.histogram]
            result["boxPlot"] = self.outliers.to_dict() if self.outliers is not None else None
        return result


@dataclass
class CategoricalProfile(ColumnProfile):
    value_counts: Optional[List[Tuple[Any, int]]] = None

    column_type = ColumnType.CATEGORICAL

    def to_dict(self, include_visuals: bool = False) -> Dict[str, Any]:
        result = super().to_dict()
        if self.value_counts is not None:
            result["valueCounts"] = [[value, count] for value, count in self.value_counts]
        return result


@dataclass
class DatetimeProfile(ColumnProfile):
    column_type = ColumnType.DATETIME


@dataclass
class OtherProfile(ColumnProfile):
    column_type = ColumnType.OTHER


@dataclass
class Correlation:
    """Pearson correlation of an unordered column pair, ``col1 < col2``."""

    col1: str
    col2: str
    correlation: float

    def to_dict(self) -> Dict[str, Any]:
        return {"col1": self.col1, "col2": self.col2, "correlation": self.correlation}


@dataclass
class InfiniteValueStat:
    count: int
    percentage: str

    def to_dict(self) -> Dict[str, Any]:
        return {"count": self.count, "percentage": self.percentage}


@dataclass
class DuplicateStat:
    """Repeated values within one column."""

    duplicate_count: int
    duplicate_percentage: str
    unique_values: int
    total_values: int
    top_duplicates: List[Tuple[str, int]]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "duplicateCount": self.duplicate_count,
            "duplicatePercentage": self.duplicate_percentage,
            "uniqueValues": self.unique_values,
            "totalValues": self.total_values,
            "topDuplicates": [{"value": value, "count": count} for value, count in self.top_duplicates],
        }


@dataclass
class Analysis:
    """
    Complete profile of one dataset snapshot.

    Always built from scratch by the assembler, so the type lists, column
    profiles and quality signals describe the same rows.
    """

    row_count: int
    column_count: int
    columns: Dict[str, ColumnProfile]
    correlations: List[Correlation]
    infinite_value_stats: Dict[str, InfiniteValueStat]
    duplicate_stats: Dict[str, DuplicateStat]

    def columns_of_type(self, column_type: ColumnType) -> List[str]:
        return [name for name, profile in self.columns.items() if profile.column_type is column_type]

    @property
    def numeric_columns(self) -> List[str]:
        return self.columns_of_type(ColumnType.NUMERIC)

    @property
    def categorical_columns(self) -> List[str]:
        return self.columns_of_type(ColumnType.CATEGORICAL)

    @property
    def date_columns(self) -> List[str]:
        return self.columns_of_type(ColumnType.DATETIME)

    @property
    def has_infinite_values(self) -> bool:
        return bool(self.infinite_value_stats)

    @property
    def total_missing(self) -> int:
        return sum(profile.missing_count for profile in self.columns.values())

    def to_dict(self, include_visuals: bool = False) -> Dict[str, Any]:
        """
        Serialize to the UI shape.

        Args:
            include_visuals: Add histogram bins and box-plot whiskers to numeric columns

        Returns:
            Dictionary with camelCase keys
        """
        return {
            "rowCount": self.row_count,
            "columnCount": self.column_count,
            "columns": {
                name: profile.to_dict(include_visuals=include_visuals)
                for name, profile in self.columns.items()
            },
            "correlations": [c.to_dict() for c in self.correlations],
            "numericColumns": self.numeric_columns,
            "categoricalColumns": self.categorical_columns,
            "dateColumns": self.date_columns,
            "infiniteValueStats": {name: s.to_dict() for name, s in self.infinite_value_stats.items()},
            "hasInfiniteValues": self.has_infinite_values,
            "duplicateStats": {name: s.to_dict() for name, s in self.duplicate_stats.items()},
        }
