"""
Analysis Module

Dataset profiling: column type classification, descriptive statistics,
outlier detection, correlations and data quality signals, assembled into a
single Analysis.
"""

from .assembler import (
    AnalysisAssembler,
    analyze_dataset,
    generate_analysis_summary,
)
from .classifier import ColumnTypeClassifier
from .config import AnalysisConfig, PreprocessingConfig
from .correlation import CorrelationEngine
from .dataset import (
    ColumnScan,
    Dataset,
    is_infinite,
    is_missing,
    parse_number,
)
from .outliers import detect_outliers, tukey_fences
from .profiler import StatisticalProfiler
from .profiles import (
    Analysis,
    CategoricalProfile,
    ColumnProfile,
    ColumnType,
    Correlation,
    DatetimeProfile,
    DuplicateStat,
    HistogramBin,
    InfiniteValueStat,
    NumericProfile,
    OtherProfile,
    OutlierSummary,
    Stats,
)
from .quality import DataQualityAuditor, MissingValueStat, QualityAudit

__all__ = [
    # Assembler
    "AnalysisAssembler",
    "analyze_dataset",
    "generate_analysis_summary",
    # Configuration
    "AnalysisConfig",
    "PreprocessingConfig",
    # Dataset
    "ColumnScan",
    "Dataset",
    "is_infinite",
    "is_missing",
    "parse_number",
    # Components
    "ColumnTypeClassifier",
    "StatisticalProfiler",
    "CorrelationEngine",
    "DataQualityAuditor",
    "detect_outliers",
    "tukey_fences",
    # Results
    "Analysis",
    "ColumnProfile",
    "ColumnType",
    "NumericProfile",
    "CategoricalProfile",
    "DatetimeProfile",
    "OtherProfile",
    "Stats",
    "OutlierSummary",
    "HistogramBin",
    "Correlation",
    "InfiniteValueStat",
    "DuplicateStat",
    "MissingValueStat",
    "QualityAudit",
]
