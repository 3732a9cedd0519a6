"""
Statistical Profiler Module

Per-column descriptive statistics for numeric columns, equal-width histogram
bins for distribution charts, and value-frequency tables for categorical
columns.

Standard deviation and skewness use the population definitions (denominator
n) everywhere: ``std = sqrt(m2)`` and ``skewness = m3 / m2**1.5``.
"""

import math
from typing import Any, List, Optional, Tuple

import numpy as np
from loguru import logger
from scipy import stats as scipy_stats

from .config import AnalysisConfig
from .dataset import ColumnScan
from .outliers import detect_outliers
from .profiles import (
    CategoricalProfile,
    ColumnProfile,
    ColumnType,
    DatetimeProfile,
    HistogramBin,
    NumericProfile,
    OtherProfile,
    OutlierSummary,
    Stats,
    format_percent,
)
from .quality import MissingValueStat


class StatisticalProfiler:
    """
    Builds ColumnProfile variants from column scans.

    Examples:
        >>> profiler = StatisticalProfiler()
        >>> stats, outliers = profiler.compute_stats(np.array([1.0, 2.0, 3.0, 100.0]))
        >>> stats.median
        2.5
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or AnalysisConfig()

    def profile_column(
        self,
        scan: ColumnScan,
        column_type: ColumnType,
        missing: Optional[MissingValueStat] = None,
    ) -> ColumnProfile:
        """
        Profile one column according to its classified type.

        Args:
            scan: Single-pass scan of the column
            column_type: Type assigned by the classifier
            missing: Missing-value finding from the quality audit; derived from
                the scan when omitted

        Returns:
            The ColumnProfile variant matching ``column_type``
        """
        if missing is None:
            missing = MissingValueStat(
                count=scan.missing_count,
                percentage=format_percent(scan.missing_count, scan.row_count),
            )

        common = dict(
            name=scan.name,
            missing_count=missing.count,
            missing_percent=missing.percentage,
            unique_count=scan.unique_count,
        )

        if column_type is ColumnType.NUMERIC:
            values = scan.finite_numbers
            stats, outliers = self.compute_stats(values)
            return NumericProfile(
                **common,
                stats=stats,
                outliers=outliers,
                histogram=self.build_histogram(values) if stats is not None else [],
            )

        if column_type is ColumnType.CATEGORICAL:
            return CategoricalProfile(**common, value_counts=self.value_counts(scan))

        if column_type is ColumnType.DATETIME:
            return DatetimeProfile(**common)

        if column_type is ColumnType.OTHER:
            return OtherProfile(**common)

        raise ValueError(f"Unknown column type: {column_type}")

    def compute_stats(
        self, values: np.ndarray
    ) -> Tuple[Optional[Stats], Optional[OutlierSummary]]:
        """
        Descriptive statistics of finite values.

        Args:
            values: Finite numeric values (unsorted)

        Returns:
            (Stats, OutlierSummary), or (None, None) with fewer than two values
        """
        if len(values) < 2:
            return None, None

        ordered = np.sort(values)
        minimum = float(ordered[0])
        maximum = float(ordered[-1])
        q1, median, q3 = (float(q) for q in np.percentile(ordered, [25, 50, 75]))
        mean = float(np.mean(ordered))
        std = float(np.std(ordered))

        skewness = 0.0
        if std > 0:
            skewness = float(scipy_stats.skew(ordered, bias=True))
            if not math.isfinite(skewness):
                skewness = 0.0

        outliers = detect_outliers(
            ordered, q1, q3, minimum, maximum, multiplier=self.config.iqr_multiplier
        )

        stats = Stats(
            count=int(len(ordered)),
            mean=mean,
            median=median,
            min=minimum,
            max=maximum,
            std=std,
            q1=q1,
            q3=q3,
            iqr=q3 - q1,
            outlier_count=outliers.count,
            skewness=skewness,
        )
        return stats, outliers

    def build_histogram(self, values: np.ndarray) -> List[HistogramBin]:
        """Equal-width bins over [min, max]; one bin when all values are equal."""
        if len(values) == 0:
            return []

        minimum = float(np.min(values))
        maximum = float(np.max(values))
        if minimum == maximum:
            return [HistogramBin(start=minimum, end=maximum, count=int(len(values)))]

        counts, edges = np.histogram(values, bins=self.config.histogram_bins, range=(minimum, maximum))
        return [
            HistogramBin(start=float(edges[i]), end=float(edges[i + 1]), count=int(count))
            for i, count in enumerate(counts)
        ]

    def value_counts(self, scan: ColumnScan) -> Optional[List[Tuple[Any, int]]]:
        """
        Frequency table sorted by count descending, ties in first-seen order.

        Only built for columns with fewer than ``value_counts_max_unique``
        distinct values; entries beyond ``value_counts_limit`` are omitted.
        """
        if scan.unique_count >= self.config.value_counts_max_unique:
            logger.debug(
                "Skipping value counts for {}: {} unique values", scan.name, scan.unique_count
            )
            return None

        return scan.frequencies(self.config.value_counts_limit)
