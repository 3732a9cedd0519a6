"""
Outlier Detector

Tukey's IQR rule over a numeric column's finite values. The resulting
whiskers double as the box-plot summary for visualisation.
"""

import numpy as np

from .profiles import OutlierSummary, format_percent


def tukey_fences(q1: float, q3: float, multiplier: float = 1.5):
    """Return the (lower, upper) Tukey fences for the given quartiles."""
    iqr = q3 - q1
    return q1 - multiplier * iqr, q3 + multiplier * iqr


def detect_outliers(
    values: np.ndarray,
    q1: float,
    q3: float,
    minimum: float,
    maximum: float,
    multiplier: float = 1.5,
) -> OutlierSummary:
    """
    Count values strictly outside the box-plot whiskers.

    Whiskers are the fences clamped to the observed range:
    ``max(min, q1 - k*iqr)`` and ``min(max, q3 + k*iqr)``.

    Args:
        values: Finite values of the column
        q1: First quartile
        q3: Third quartile
        minimum: Smallest finite value
        maximum: Largest finite value
        multiplier: Fence width in IQRs

    Returns:
        OutlierSummary with fences, whiskers and the outlier count
    """
    lower_fence, upper_fence = tukey_fences(q1, q3, multiplier)
    lower_whisker = max(minimum, lower_fence)
    upper_whisker = min(maximum, upper_fence)

    mask = (values < lower_whisker) | (values > upper_whisker)
    count = int(np.count_nonzero(mask))

    return OutlierSummary(
        lower_fence=float(lower_fence),
        upper_fence=float(upper_fence),
        lower_whisker=float(lower_whisker),
        upper_whisker=float(upper_whisker),
        count=count,
        percentage=format_percent(count, len(values)),
    )
