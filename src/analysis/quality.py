"""
Data Quality Module

Data quality signals for a dataset snapshot: missing cells per column,
non-finite (+/-Infinity) values in numeric columns, and repeated values per
column with the most frequent repeats.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from loguru import logger

from .config import AnalysisConfig
from .dataset import ColumnScan, to_native
from .profiles import ColumnType, DuplicateStat, InfiniteValueStat, format_percent


@dataclass
class MissingValueStat:
    count: int
    percentage: str


@dataclass
class QualityAudit:
    """Container for data quality audit results."""

    missing_values: Dict[str, MissingValueStat]
    infinite_values: Dict[str, InfiniteValueStat]
    duplicates: Dict[str, DuplicateStat]

    @property
    def has_infinite_values(self) -> bool:
        return bool(self.infinite_values)


class DataQualityAuditor:
    """
    Data quality auditor.

    Performs the quality checks surfaced in every Analysis:
    - Missing value detection (all columns)
    - Infinite value detection (numeric columns)
    - Duplicate value detection (all columns)

    Examples:
        >>> auditor = DataQualityAuditor()
        >>> audit = auditor.audit(dataset.scan_columns(), column_types, dataset.row_count)
        >>> audit.has_infinite_values
        False
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        """
        Initialize DataQualityAuditor.

        Args:
            config: Configuration object for quality checks
        """
        self.config = config or AnalysisConfig()

    def audit(
        self,
        scans: Dict[str, ColumnScan],
        column_types: Dict[str, ColumnType],
        row_count: int,
    ) -> QualityAudit:
        """
        Run every quality check.

        Args:
            scans: Column scans keyed by column name
            column_types: Classified type of each column
            row_count: Number of rows in the dataset

        Returns:
            QualityAudit with missing, infinite and duplicate findings
        """
        numeric_columns = [c for c, t in column_types.items() if t is ColumnType.NUMERIC]

        audit = QualityAudit(
            missing_values=self.analyze_missing_values(scans, row_count),
            infinite_values=self.detect_infinite_values(scans, numeric_columns, row_count),
            duplicates=self.detect_duplicates(scans),
        )

        logger.debug(
            "Quality audit: {} columns with missing values, {} with infinite values, {} with duplicates",
            sum(1 for s in audit.missing_values.values() if s.count > 0),
            len(audit.infinite_values),
            len(audit.duplicates),
        )
        return audit

    def analyze_missing_values(
        self, scans: Dict[str, ColumnScan], row_count: int
    ) -> Dict[str, MissingValueStat]:
        """Missing cell count and percentage of all rows, for every column."""
        return {
            name: MissingValueStat(
                count=scan.missing_count,
                percentage=format_percent(scan.missing_count, row_count),
            )
            for name, scan in scans.items()
        }

    def detect_infinite_values(
        self, scans: Dict[str, ColumnScan], numeric_columns, row_count: int
    ) -> Dict[str, InfiniteValueStat]:
        """Numeric columns holding +/-Infinity; columns without any are omitted."""
        infinite = {}
        for column in numeric_columns:
            count = scans[column].infinite_count
            if count > 0:
                infinite[column] = InfiniteValueStat(
                    count=count, percentage=format_percent(count, row_count)
                )
                logger.debug("Column {} has {} infinite values", column, count)
        return infinite

    def detect_duplicates(self, scans: Dict[str, ColumnScan]) -> Dict[str, DuplicateStat]:
        """
        Repeated non-missing values per column.

        ``duplicateCount`` is the number of values beyond the first occurrence
        of each distinct value; the percentage is relative to non-missing
        values. Columns with no repeats are omitted.
        """
        duplicates = {}
        max_length = self.config.duplicate_value_max_length

        for name, scan in scans.items():
            total = scan.present_count
            unique = scan.unique_count
            duplicate_count = total - unique
            if duplicate_count <= 0:
                continue

            repeated = scan.counts[scan.counts > 1].iloc[: self.config.top_duplicates_limit]
            top = [
                (str(to_native(key))[:max_length], int(count)) for key, count in repeated.items()
            ]

            duplicates[name] = DuplicateStat(
                duplicate_count=duplicate_count,
                duplicate_percentage=format_percent(duplicate_count, total),
                unique_values=unique,
                total_values=total,
                top_duplicates=top,
            )

        return duplicates
