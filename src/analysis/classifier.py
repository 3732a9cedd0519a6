"""
Column Type Classifier

Infers each column's semantic type from a bounded prefix of its values:
numeric first, then datetime, then categorical vs free text by cardinality.
"""

from typing import Any, Dict, List, Optional

from loguru import logger

from .config import AnalysisConfig
from .dataset import Dataset, is_date_like, is_missing, parse_number, value_key
from .profiles import ColumnType


class ColumnTypeClassifier:
    """
    Deterministic column type classifier.

    Examples:
        >>> classifier = ColumnTypeClassifier()
        >>> classifier.classify_values([1, 2, "3", None])
        <ColumnType.NUMERIC: 'numeric'>
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or AnalysisConfig()

    def classify_values(self, values: List[Any]) -> ColumnType:
        """
        Classify one column from its raw values.

        Args:
            values: Cell values in row order

        Returns:
            ColumnType of the column
        """
        sample = values[: self.config.classification_sample_size]
        present = [v for v in sample if not is_missing(v)]

        if not present:
            return ColumnType.OTHER

        total = len(present)

        numeric = sum(1 for v in present if parse_number(v) is not None)
        if numeric / total >= self.config.numeric_threshold:
            return ColumnType.NUMERIC

        dates = sum(1 for v in present if is_date_like(v, self.config.date_formats))
        if dates / total >= self.config.datetime_threshold:
            return ColumnType.DATETIME

        unique = len({value_key(v) for v in present})
        if unique / total < self.config.categorical_unique_ratio:
            return ColumnType.CATEGORICAL

        return ColumnType.OTHER

    def classify(self, dataset: Dataset) -> Dict[str, ColumnType]:
        """Classify every column of a dataset, in column order."""
        types = {}
        for column in dataset.columns:
            types[column] = self.classify_values(dataset.column_values(column))
            logger.debug("Column {} classified as {}", column, types[column].value)
        return types
