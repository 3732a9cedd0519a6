"""
Correlation Engine

Pearson correlation between every pair of numeric columns, computed over
pairwise-complete observations: a row counts for a pair when both of its cells
are finite numbers, regardless of the other columns.
"""

from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
from loguru import logger

from .config import AnalysisConfig
from .dataset import ColumnScan
from .profiles import Correlation


class CorrelationEngine:
    """
    Pairwise-complete Pearson correlation engine.

    Examples:
        >>> engine = CorrelationEngine()
        >>> correlations = engine.compute(scans, ["height", "weight"])
        >>> correlations[0].col1, correlations[0].col2
        ('height', 'weight')
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or AnalysisConfig()

    def compute(self, scans: Dict[str, ColumnScan], numeric_columns: Sequence[str]) -> List[Correlation]:
        """
        Correlate every unordered pair of numeric columns.

        Pairs with fewer than ``min_correlation_pairs`` paired observations are
        skipped. Zero variance within the paired rows yields 0.

        Args:
            scans: Column scans keyed by column name
            numeric_columns: Columns classified as numeric

        Returns:
            Correlations with ``col1 < col2``, sorted by absolute value descending
        """
        if len(numeric_columns) < 2:
            logger.debug("Less than 2 numeric columns, skipping correlation analysis")
            return []

        columns = sorted(numeric_columns)
        frame = pd.DataFrame({column: scans[column].numbers for column in columns})
        frame = frame.where(np.isfinite(frame))

        min_pairs = self.config.min_correlation_pairs
        corr_matrix = frame.corr(method="pearson", min_periods=min_pairs)
        present = frame.notna().astype(int)
        pair_counts = present.T.dot(present)

        correlations = []
        for i, col1 in enumerate(columns):
            for col2 in columns[i + 1:]:
                if pair_counts.loc[col1, col2] < min_pairs:
                    continue

                value = corr_matrix.loc[col1, col2]
                if not np.isfinite(value):
                    value = 0.0

                correlations.append(
                    Correlation(col1=col1, col2=col2, correlation=float(np.clip(value, -1.0, 1.0)))
                )

        correlations.sort(key=lambda c: (-abs(c.correlation), c.col1, c.col2))

        logger.debug("Computed {} correlation pairs", len(correlations))
        return correlations

