"""
Analysis Configuration Module

Thresholds and caps used by the column classifier, profiler, outlier detector,
correlation engine and data quality auditor. Defaults can be overridden from
the ``analysis`` section of a YAML file.

Example:
    >>> config = AnalysisConfig.from_yaml("config/analysis_config.yaml")
    >>> config.numeric_threshold
    0.9
"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml
from loguru import logger


DEFAULT_DATE_FORMATS: Tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%m/%d/%y",
    "%d-%m-%Y",
)


def _load_section(config_path: Optional[Union[str, Path]], section: str) -> Dict[str, Any]:
    """Read one top-level section of a YAML config file, or {} when absent."""
    if not config_path or not Path(config_path).exists():
        if config_path:
            logger.warning("Config file not found: {}, using defaults", config_path)
        return {}

    with open(config_path, "r") as f:
        full_config = yaml.safe_load(f) or {}

    return full_config.get(section, {}) or {}


@dataclass
class AnalysisConfig:
    """Configuration for dataset analysis."""

    # Column type classification
    classification_sample_size: int = 1000
    numeric_threshold: float = 0.9
    datetime_threshold: float = 0.9
    categorical_unique_ratio: float = 0.5
    date_formats: Tuple[str, ...] = field(default_factory=lambda: DEFAULT_DATE_FORMATS)

    # Value frequency tables
    value_counts_limit: int = 15
    value_counts_max_unique: int = 50

    # Distributions
    histogram_bins: int = 25

    # Outlier detection (Tukey fences)
    iqr_multiplier: float = 1.5

    # Correlation
    min_correlation_pairs: int = 2

    # Duplicate detection
    top_duplicates_limit: int = 5
    duplicate_value_max_length: int = 30

    def __post_init__(self):
        """Validate thresholds and caps."""
        for name in ("numeric_threshold", "datetime_threshold", "categorical_unique_ratio"):
            value = getattr(self, name)
            if not 0 < value <= 1:
                raise ValueError(f"{name} must be in (0, 1], got {value}")

        for name in (
            "classification_sample_size",
            "value_counts_limit",
            "value_counts_max_unique",
            "histogram_bins",
            "top_duplicates_limit",
            "duplicate_value_max_length",
        ):
            value = getattr(self, name)
            if value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value}")

        if self.iqr_multiplier < 0:
            raise ValueError(f"iqr_multiplier must be non-negative, got {self.iqr_multiplier}")

        if self.min_correlation_pairs < 2:
            raise ValueError(
                f"min_correlation_pairs must be at least 2, got {self.min_correlation_pairs}"
            )

        self.date_formats = tuple(self.date_formats)

    @classmethod
    def from_yaml(cls, config_path: Optional[Union[str, Path]] = None) -> "AnalysisConfig":
        """
        Build a config from the ``analysis`` section of a YAML file.

        Unknown keys are ignored with a warning; missing keys keep their defaults.

        Args:
            config_path: Path to the YAML file. If None or missing, uses defaults.

        Returns:
            AnalysisConfig instance
        """
        section = _load_section(config_path, "analysis")
        known = {f.name for f in fields(cls)}

        unknown = sorted(set(section) - known)
        if unknown:
            logger.warning("Ignoring unknown analysis config keys: {}", unknown)

        return cls(**{k: v for k, v in section.items() if k in known})


@dataclass
class PreprocessingConfig:
    """Defaults for the automated preprocessing pipeline."""

    missing_value_method: str = "fillMedian"
    fill_categorical_with_mode: bool = True
    encoding_method: str = "label"
    normalization_method: str = "standard"

    @classmethod
    def from_yaml(cls, config_path: Optional[Union[str, Path]] = None) -> "PreprocessingConfig":
        """Build a config from the ``preprocessing`` section of a YAML file."""
        section = _load_section(config_path, "preprocessing")
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in section.items() if k in known})
