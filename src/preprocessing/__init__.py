"""
Preprocessing Module

Serial preprocessing pipeline over dataset snapshots: infinite-value cleanup,
missing-value handling, categorical encoding and normalization, plus the
automated default pipeline and delimited-text export.
"""

from .automation import (
    AutomationPipeline,
    AutomationResult,
    ExecutionMetrics,
    automate,
)
from .export import export_delimited, export_filename
from .methods import (
    EncodingMethod,
    MissingValueMethod,
    NormalizationMethod,
    PreprocessingState,
    PreprocessOptions,
    UnknownMethodError,
)
from .transformer import (
    PreprocessingTransformer,
    PreprocessResult,
    StepResult,
    preprocess,
)
from .transforms import (
    TransformOutcome,
    encode_categorical,
    fill_with_mode,
    handle_missing_values,
    normalize,
    replace_infinite,
)

__all__ = [
    # Transformer
    "PreprocessingTransformer",
    "PreprocessResult",
    "StepResult",
    "preprocess",
    # Automation
    "AutomationPipeline",
    "AutomationResult",
    "ExecutionMetrics",
    "automate",
    # Export
    "export_delimited",
    "export_filename",
    # Methods
    "EncodingMethod",
    "MissingValueMethod",
    "NormalizationMethod",
    "PreprocessingState",
    "PreprocessOptions",
    "UnknownMethodError",
    # Transforms
    "TransformOutcome",
    "encode_categorical",
    "fill_with_mode",
    "handle_missing_values",
    "normalize",
    "replace_infinite",
]
