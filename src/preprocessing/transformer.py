"""
Preprocessing Transformer

Applies preprocessing stages to a Dataset snapshot in their fixed order:
infinite-value cleanup, missing-value handling, categorical encoding and
normalization. Each stage builds a new snapshot, re-runs the full analysis on
it and appends one entry to the snapshot's step log.

Example:
    >>> transformer = PreprocessingTransformer()
    >>> result = transformer.preprocess(rows, {"missingValueMethod": "fillMean"})
    >>> result.preprocessing_steps
    ['Filled missing values with mean (1 values)']
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from loguru import logger

from analysis import Analysis, AnalysisAssembler, AnalysisConfig, Dataset

from .methods import (
    EncodingMethod,
    MissingValueMethod,
    NormalizationMethod,
    PreprocessingState,
    PreprocessOptions,
    parse_method,
)
from .transforms import (
    TransformOutcome,
    encode_categorical,
    fill_with_mode,
    handle_missing_values,
    normalize,
    replace_infinite,
)

MISSING_VALUE_DESCRIPTIONS = {
    MissingValueMethod.DROP_ROWS: "Dropped rows with missing values ({} rows removed)",
    MissingValueMethod.DROP_COLUMNS: "Dropped columns with missing values ({} columns removed)",
    MissingValueMethod.FILL_MEAN: "Filled missing values with mean ({} values)",
    MissingValueMethod.FILL_MEDIAN: "Filled missing values with median ({} values)",
    MissingValueMethod.FILL_MODE: "Filled missing values with mode ({} values)",
    MissingValueMethod.FILL_ZERO: "Filled missing values with zero ({} values)",
}

ENCODING_NAMES = {
    EncodingMethod.LABEL: "Label",
    EncodingMethod.ONEHOT: "One-Hot",
}

NORMALIZATION_NAMES = {
    NormalizationMethod.MINMAX: "Min-Max",
    NormalizationMethod.STANDARD: "Standard",
}


@dataclass
class StepResult:
    """Outcome of one preprocessing stage."""

    dataset: Dataset
    analysis: Analysis
    state: PreprocessingState
    affected: int = 0
    affected_columns: List[str] = field(default_factory=list)
    applied: bool = True


@dataclass
class PreprocessResult:
    """Final snapshot and analysis after a preprocess call."""

    dataset: Dataset
    analysis: Analysis
    state: PreprocessingState

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
        }


def as_dataset(data: Union[Dataset, Iterable[Mapping[str, Any]]]) -> Dataset:
    return data if isinstance(data, Dataset) else Dataset.from_records(data)


class PreprocessingTransformer:
    """
    Serial preprocessing pipeline over Dataset snapshots.

    Input snapshots are never modified, so a failing stage leaves the caller's
    snapshot as it was.

    Examples:
        >>> transformer = PreprocessingTransformer()
        >>> step = transformer.normalize(dataset, "minmax")
        >>> step.dataset.steps[-1]
        'Applied Min-Max Normalization to 2 numeric columns'
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        """
        Initialize PreprocessingTransformer.

        Args:
            config: Analysis configuration used when re-profiling each snapshot
        """
        self.assembler = AnalysisAssembler(config)

    def analyze(self, dataset: Dataset) -> Analysis:
        return self.assembler.analyze(dataset)

    def _advance(
        self,
        dataset: Dataset,
        outcome: TransformOutcome,
        description: str,
        state: PreprocessingState,
    ) -> StepResult:
        new_dataset = dataset.derive(
            outcome.rows,
            columns=outcome.columns,
            step=description,
            encoded_columns=outcome.encoded_columns,
        )
        logger.info("Preprocessing step: {}", description)
        return StepResult(
            dataset=new_dataset,
            analysis=self.analyze(new_dataset),
            state=state,
            affected=outcome.affected,
            affected_columns=list(outcome.affected_columns),
        )

    def handle_infinite(self, dataset: Dataset, analysis: Optional[Analysis] = None) -> StepResult:
        """
        Replace +/-Infinity in numeric columns with missing cells.

        Skipped, without a log entry, when the analysis reports no infinite
        values.
        """
        analysis = analysis or self.analyze(dataset)
        if not analysis.has_infinite_values:
            logger.info("No infinite values found, skipping infinite value handling")
            return StepResult(
                dataset=dataset,
                analysis=analysis,
                state=PreprocessingState.INFINITE_HANDLED,
                applied=False,
            )

        outcome = replace_infinite(dataset, list(analysis.infinite_value_stats))
        return self._advance(
            dataset,
            outcome,
            f"Replaced {outcome.affected} infinite values with missing values",
            PreprocessingState.INFINITE_HANDLED,
        )

    def handle_missing(
        self,
        dataset: Dataset,
        method: Union[str, MissingValueMethod],
        analysis: Optional[Analysis] = None,
    ) -> StepResult:
        """Drop or fill missing cells with the given method."""
        method = parse_method(MissingValueMethod, method, "missing value")
        if method is None:
            raise ValueError("A missing value method is required")

        analysis = analysis or self.analyze(dataset)
        outcome = handle_missing_values(dataset, method, analysis)
        return self._advance(
            dataset,
            outcome,
            MISSING_VALUE_DESCRIPTIONS[method].format(outcome.affected),
            PreprocessingState.MISSING_HANDLED,
        )

    def fill_categorical_mode(self, dataset: Dataset, analysis: Optional[Analysis] = None) -> StepResult:
        """Fill missing cells of categorical columns with their most frequent value."""
        analysis = analysis or self.analyze(dataset)
        outcome = fill_with_mode(dataset, analysis.categorical_columns)
        if outcome.affected == 0:
            return StepResult(
                dataset=dataset,
                analysis=analysis,
                state=PreprocessingState.MISSING_HANDLED,
                applied=False,
            )
        return self._advance(
            dataset,
            outcome,
            f"Filled {outcome.affected} missing categorical values with mode",
            PreprocessingState.MISSING_HANDLED,
        )

    def encode(
        self,
        dataset: Dataset,
        method: Union[str, EncodingMethod],
        analysis: Optional[Analysis] = None,
    ) -> StepResult:
        """Encode the categorical columns with the given method."""
        method = parse_method(EncodingMethod, method, "encoding")
        if method is None:
            raise ValueError("An encoding method is required")

        analysis = analysis or self.analyze(dataset)
        outcome = encode_categorical(dataset, method, analysis.categorical_columns)
        return self._advance(
            dataset,
            outcome,
            f"Applied {ENCODING_NAMES[method]} Encoding to {outcome.affected} categorical columns",
            PreprocessingState.ENCODED,
        )

    def normalize(
        self,
        dataset: Dataset,
        method: Union[str, NormalizationMethod],
        analysis: Optional[Analysis] = None,
    ) -> StepResult:
        """
        Rescale the numeric columns with the given method.

        Columns produced by categorical encoding keep their codes.
        """
        method = parse_method(NormalizationMethod, method, "normalization")
        if method is None:
            raise ValueError("A normalization method is required")

        analysis = analysis or self.analyze(dataset)
        encoded = set(dataset.encoded_columns)
        columns = [c for c in analysis.numeric_columns if c not in encoded]

        outcome = normalize(dataset, method, columns)
        return self._advance(
            dataset,
            outcome,
            f"Applied {NORMALIZATION_NAMES[method]} Normalization to "
            f"{len(outcome.affected_columns)} numeric columns",
            PreprocessingState.NORMALIZED,
        )

    def preprocess(
        self,
        data: Union[Dataset, Iterable[Mapping[str, Any]]],
        options: Union[PreprocessOptions, Mapping[str, Any], None] = None,
        analysis: Optional[Analysis] = None,
    ) -> PreprocessResult:
        """
        Apply the requested stages in order.

        Options are validated before any stage runs.

        Args:
            data: Dataset snapshot or row records
            options: PreprocessOptions or a dict with ``handleInfinite``,
                ``missingValueMethod``, ``encodingMethod``, ``normalizationMethod``
            analysis: Analysis of ``data``, computed when omitted

        Returns:
            PreprocessResult with the final snapshot and its analysis

        Raises:
            UnknownMethodError: If a method name is not supported
        """
        if not isinstance(options, PreprocessOptions):
            options = PreprocessOptions.from_dict(options)

        dataset = as_dataset(data)
        analysis = analysis or self.analyze(dataset)
        state = PreprocessingState.RAW

        logger.info("Starting preprocessing: {}", options)

        stages = []
        if options.handle_infinite:
            stages.append(lambda d, a: self.handle_infinite(d, a))
        if options.missing_value_method:
            stages.append(lambda d, a: self.handle_missing(d, options.missing_value_method, a))
        if options.encoding_method:
            stages.append(lambda d, a: self.encode(d, options.encoding_method, a))
        if options.normalization_method:
            stages.append(lambda d, a: self.normalize(d, options.normalization_method, a))

        for stage in stages:
            step = stage(dataset, analysis)
            dataset, analysis = step.dataset, step.analysis
            if step.applied:
                state = step.state

        logger.info(
            "Preprocessing complete: {} rows, {} columns, {} steps logged",
            dataset.row_count,
            dataset.column_count,
            len(dataset.steps),
        )
        return PreprocessResult(dataset=dataset, analysis=analysis, state=state)


def preprocess(
    data: Union[Dataset, Iterable[Mapping[str, Any]]],
    options: Union[PreprocessOptions, Mapping[str, Any], None] = None,
    config: Optional[AnalysisConfig] = None,
) -> PreprocessResult:
    """Apply the requested preprocessing stages to a dataset."""
    return PreprocessingTransformer(config).preprocess(data, options)
