"""
Automated Preprocessing Pipeline

Runs the default preprocessing sequence in one call: infinite-value cleanup,
imputation, label encoding and standard normalization, with informational
log entries for the data quality and outlier findings along the way, and
execution metrics for the run.

Example:
    >>> result = automate(rows)
    >>> result.metrics.missing_values_filled
    3
"""

import time
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from loguru import logger

from analysis import Analysis, AnalysisConfig, Dataset, PreprocessingConfig

from .methods import EncodingMethod, MissingValueMethod, NormalizationMethod, parse_method
from .transformer import PreprocessingTransformer, as_dataset


@dataclass
class ExecutionMetrics:
    """Counters collected while the automated pipeline runs."""

    rows_processed: int = 0
    columns_processed: int = 0
    infinite_values_replaced: int = 0
    missing_values_filled: int = 0
    columns_encoded: int = 0
    columns_normalized: int = 0
    execution_time_ms: float = 0.0

    @property
    def execution_time_seconds(self) -> str:
        return f"{self.execution_time_ms / 1000:.2f}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rowsProcessed": self.rows_processed,
            "columnsProcessed": self.columns_processed,
            "infiniteValuesReplaced": self.infinite_values_replaced,
            "missingValuesFilled": self.missing_values_filled,
            "columnsEncoded": self.columns_encoded,
            "columnsNormalized": self.columns_normalized,
            "executionTimeMs": self.execution_time_ms,
            "executionTimeSeconds": self.execution_time_seconds,
        }


@dataclass
class AutomationResult:
    dataset: Dataset
    analysis: Analysis
    metrics: ExecutionMetrics

    @property
    def data(self) -> List[Dict[str, Any]]:
        return self.dataset.to_records()

    @property
    def preprocessing_steps(self) -> List[str]:
        return list(self.dataset.steps)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": self.data,
            "analysis": self.analysis.to_dict(),
            "preprocessingSteps": self.preprocessing_steps,
            "metrics": self.metrics.to_dict(),
        }


class AutomationPipeline:
    """
    Default end-to-end preprocessing.

    The run starts a fresh step log from the given rows.

    Examples:
        >>> pipeline = AutomationPipeline()
        >>> result = pipeline.run(rows)
        >>> print(result.metrics.to_dict())
    """

    def __init__(
        self,
        config: Optional[PreprocessingConfig] = None,
        analysis_config: Optional[AnalysisConfig] = None,
    ):
        """
        Initialize AutomationPipeline.

        Args:
            config: Methods used for each stage
            analysis_config: Analysis configuration used when re-profiling

        Raises:
            UnknownMethodError: If a configured method name is not supported
        """
        self.config = config or PreprocessingConfig()
        self.missing_value_method = parse_method(
            MissingValueMethod, self.config.missing_value_method, "missing value"
        )
        self.encoding_method = parse_method(EncodingMethod, self.config.encoding_method, "encoding")
        self.normalization_method = parse_method(
            NormalizationMethod, self.config.normalization_method, "normalization"
        )
        self.transformer = PreprocessingTransformer(analysis_config)

    def _note(self, dataset: Dataset, message: str) -> Dataset:
        logger.info("Automation: {}", message)
        return dataset.with_steps(dataset.steps + (message,))

    def run(self, data: Union[Dataset, Iterable[Mapping[str, Any]]]) -> AutomationResult:
        """
        Run the automated pipeline.

        Args:
            data: Dataset snapshot or row records

        Returns:
            AutomationResult with the final snapshot, its analysis and metrics
        """
        start = time.perf_counter()
        source = as_dataset(data)
        dataset = Dataset.from_records(source.rows, columns=source.columns)

        logger.info("Starting automated preprocessing pipeline")

        analysis = self.transformer.analyze(dataset)
        metrics = ExecutionMetrics(
            rows_processed=analysis.row_count,
            columns_processed=analysis.column_count,
        )
        dataset = self._note(
            dataset, f"Data validation: Detected {analysis.column_count} columns with type analysis"
        )

        if analysis.has_infinite_values:
            step = self.transformer.handle_infinite(dataset, analysis)
            dataset, analysis = step.dataset, step.analysis
            metrics.infinite_values_replaced = step.affected

        missing_before = analysis.total_missing
        if missing_before > 0 and self.missing_value_method is not None:
            step = self.transformer.handle_missing(dataset, self.missing_value_method, analysis)
            dataset, analysis = step.dataset, step.analysis

            if self.config.fill_categorical_with_mode:
                step = self.transformer.fill_categorical_mode(dataset, analysis)
                dataset, analysis = step.dataset, step.analysis

            metrics.missing_values_filled = missing_before - analysis.total_missing

        if analysis.duplicate_stats:
            dataset = self._note(
                dataset,
                f"Data quality: Detected duplicates in {len(analysis.duplicate_stats)} columns",
            )

        outlier_columns = [
            name
            for name in analysis.numeric_columns
            if analysis.columns[name].stats is not None
            and analysis.columns[name].stats.outlier_count > 0
        ]
        if outlier_columns:
            dataset = self._note(
                dataset,
                f"Outlier detection: Found outliers in {len(outlier_columns)} numeric columns",
            )

        if analysis.categorical_columns and self.encoding_method is not None:
            step = self.transformer.encode(dataset, self.encoding_method, analysis)
            dataset, analysis = step.dataset, step.analysis
            metrics.columns_encoded = step.affected

        encoded = set(dataset.encoded_columns)
        if self.normalization_method is not None and any(
            c not in encoded for c in analysis.numeric_columns
        ):
            step = self.transformer.normalize(dataset, self.normalization_method, analysis)
            dataset, analysis = step.dataset, step.analysis
            metrics.columns_normalized = len(step.affected_columns)

        metrics.execution_time_ms = (time.perf_counter() - start) * 1000

        logger.info(
            "Automated preprocessing complete in {}s: {} steps",
            metrics.execution_time_seconds,
            len(dataset.steps),
        )
        return AutomationResult(dataset=dataset, analysis=analysis, metrics=metrics)


def automate(
    data: Union[Dataset, Iterable[Mapping[str, Any]]],
    config: Optional[PreprocessingConfig] = None,
    analysis_config: Optional[AnalysisConfig] = None,
) -> AutomationResult:
    """Run the default preprocessing sequence on a dataset."""
    return AutomationPipeline(config, analysis_config).run(data)
