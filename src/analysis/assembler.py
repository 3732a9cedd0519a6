"""
Analysis Assembler

Composes classifier, profiler, correlation engine and quality auditor output
into a single Analysis. Every call recomputes from the rows; nothing is carried
over from a previous Analysis.

Example:
    >>> analysis = analyze_dataset(Dataset.from_records(rows))
    >>> analysis.to_dict()["numericColumns"]
    ['a']
"""

from typing import Any, Iterable, Mapping, Optional, Union

from loguru import logger

from .classifier import ColumnTypeClassifier
from .config import AnalysisConfig
from .correlation import CorrelationEngine
from .dataset import Dataset
from .profiler import StatisticalProfiler
from .profiles import Analysis, ColumnType
from .quality import DataQualityAuditor


class AnalysisAssembler:
    """
    Builds an Analysis from a Dataset snapshot.

    Examples:
        >>> assembler = AnalysisAssembler()
        >>> analysis = assembler.analyze(dataset)
        >>> print(f"Numeric columns: {analysis.numeric_columns}")
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        """
        Initialize AnalysisAssembler.

        Args:
            config: Configuration shared by every analysis component
        """
        self.config = config or AnalysisConfig()
        self.classifier = ColumnTypeClassifier(self.config)
        self.profiler = StatisticalProfiler(self.config)
        self.correlation_engine = CorrelationEngine(self.config)
        self.auditor = DataQualityAuditor(self.config)

    def analyze(self, dataset: Dataset) -> Analysis:
        """
        Analyze a dataset snapshot.

        Args:
            dataset: Snapshot to profile

        Returns:
            Fresh Analysis for the snapshot
        """
        logger.info("Starting dataset analysis")
        logger.info("Dataset shape: {} rows, {} columns", dataset.row_count, dataset.column_count)

        scans = dataset.scan_columns()
        column_types = self.classifier.classify(dataset)

        audit = self.auditor.audit(scans, column_types, dataset.row_count)

        columns = {
            name: self.profiler.profile_column(scans[name], column_types[name], audit.missing_values[name])
            for name in dataset.columns
        }

        numeric_columns = [name for name, t in column_types.items() if t is ColumnType.NUMERIC]
        correlations = self.correlation_engine.compute(scans, numeric_columns)

        analysis = Analysis(
            row_count=dataset.row_count,
            column_count=dataset.column_count,
            columns=columns,
            correlations=correlations,
            infinite_value_stats=audit.infinite_values,
            duplicate_stats=audit.duplicates,
        )

        logger.info(
            "Analysis complete: {} numeric, {} categorical, {} datetime columns",
            len(analysis.numeric_columns),
            len(analysis.categorical_columns),
            len(analysis.date_columns),
        )
        return analysis


def analyze_dataset(
    data: Union[Dataset, Iterable[Mapping[str, Any]]],
    config: Optional[AnalysisConfig] = None,
) -> Analysis:
    """
    Analyze a Dataset or a sequence of row records.

    Args:
        data: Dataset snapshot or row records
        config: Optional analysis configuration

    Returns:
        Analysis of the data
    """
    dataset = data if isinstance(data, Dataset) else Dataset.from_records(data)
    return AnalysisAssembler(config).analyze(dataset)


def generate_analysis_summary(analysis: Analysis, steps: Iterable[str] = ()) -> str:
    """
    Generate human-readable summary of an Analysis.

    Args:
        analysis: Analysis object
        steps: Preprocessing steps applied to the data, in order

    Returns:
        Formatted summary string
    """
    summary_lines = [
        "=" * 80,
        "DATASET ANALYSIS SUMMARY",
        "=" * 80,
        "",
        "DATASET OVERVIEW:",
        f"  Rows: {analysis.row_count:,}",
        f"  Columns: {analysis.column_count}",
        f"  Numeric: {len(analysis.numeric_columns)}",
        f"  Categorical: {len(analysis.categorical_columns)}",
        f"  Datetime: {len(analysis.date_columns)}",
        f"  Missing cells: {analysis.total_missing:,}",
        "",
    ]

    missing = [(name, p) for name, p in analysis.columns.items() if p.missing_count > 0]
    if missing:
        summary_lines.extend(
            [
                "MISSING VALUES:",
                *[f"  - {name}: {p.missing_count} ({p.missing_percent}%)" for name, p in missing],
                "",
            ]
        )

    if analysis.has_infinite_values:
        summary_lines.extend(
            [
                "INFINITE VALUES:",
                *[
                    f"  - {name}: {s.count} ({s.percentage}%)"
                    for name, s in analysis.infinite_value_stats.items()
                ],
                "",
            ]
        )

    outlier_lines = []
    for name in analysis.numeric_columns:
        stats = analysis.columns[name].stats
        if stats is not None and stats.outlier_count > 0:
            outlier_lines.append(f"  - {name}: {stats.outlier_count}")
    if outlier_lines:
        summary_lines.extend(["OUTLIERS (IQR rule):", *outlier_lines, ""])

    if analysis.correlations:
        summary_lines.extend(
            [
                "TOP CORRELATIONS:",
                *[
                    f"  {c.col1} ~ {c.col2}: {c.correlation:.3f}"
                    for c in analysis.correlations[:10]
                ],
                "",
            ]
        )

    steps = list(steps)
    if steps:
        summary_lines.extend(
            [
                "PREPROCESSING STEPS:",
                *[f"  {i}. {step}" for i, step in enumerate(steps, start=1)],
                "",
            ]
        )

    summary_lines.append("=" * 80)

    return "\n".join(summary_lines)
