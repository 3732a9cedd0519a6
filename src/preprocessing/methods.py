"""
Preprocessing Methods

Method enums for each preprocessing stage and the options accepted by the
preprocess operation. Unknown method names fail before any step runs.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Type, TypeVar


class PreprocessingState(Enum):
    """Pipeline stages, in the order they are applied."""

    RAW = 0
    INFINITE_HANDLED = 1
    MISSING_HANDLED = 2
    ENCODED = 3
    NORMALIZED = 4


class MissingValueMethod(str, Enum):
    DROP_ROWS = "dropRows"
    DROP_COLUMNS = "dropColumns"
    FILL_MEAN = "fillMean"
    FILL_MEDIAN = "fillMedian"
    FILL_MODE = "fillMode"
    FILL_ZERO = "fillZero"


class EncodingMethod(str, Enum):
    LABEL = "label"
    ONEHOT = "onehot"


class NormalizationMethod(str, Enum):
    MINMAX = "minmax"
    STANDARD = "standard"


class UnknownMethodError(ValueError):
    """Raised when a preprocessing method name is not supported."""

    def __init__(self, kind: str, method: Any, allowed: Sequence[str]):
        self.kind = kind
        self.method = method
        self.allowed = list(allowed)
        super().__init__(
            f"Unknown {kind} method: {method!r}. Expected one of: {', '.join(self.allowed)}"
        )


M = TypeVar("M", bound=Enum)

NOT_REQUESTED = (None, "", "none")

FLAG_VALUES = {"true": True, "false": False}


def parse_method(enum_cls: Type[M], value: Any, kind: str) -> Optional[M]:
    """
    Resolve a method name to its enum member.

    Args:
        enum_cls: Enum of supported methods
        value: Enum member, method name, or None/"none" for "not requested"
        kind: Stage name used in the error message

    Returns:
        The enum member, or None when the stage is not requested

    Raises:
        UnknownMethodError: If ``value`` names no supported method
    """
    if isinstance(value, enum_cls):
        return value
    if value in NOT_REQUESTED:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        raise UnknownMethodError(kind, value, [m.value for m in enum_cls]) from None


def parse_flag(value: Any, name: str) -> bool:
    """
    Resolve a boolean option from a bool, None or a "true"/"false" string.

    Raises:
        ValueError: For any other value
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in FLAG_VALUES:
        return FLAG_VALUES[value.strip().lower()]
    raise ValueError(f"Option {name} must be a boolean, got {value!r}")


_OPTION_KEYS = {
    "handleInfinite": "handle_infinite",
    "handle_infinite": "handle_infinite",
    "missingValueMethod": "missing_value_method",
    "missing_value_method": "missing_value_method",
    "encodingMethod": "encoding_method",
    "encoding_method": "encoding_method",
    "normalizationMethod": "normalization_method",
    "normalization_method": "normalization_method",
}


@dataclass
class PreprocessOptions:
    """Requested preprocessing; every stage is optional."""

    handle_infinite: bool = False
    missing_value_method: Optional[MissingValueMethod] = None
    encoding_method: Optional[EncodingMethod] = None
    normalization_method: Optional[NormalizationMethod] = None

    def __post_init__(self):
        self.handle_infinite = parse_flag(self.handle_infinite, "handleInfinite")
        self.missing_value_method = parse_method(
            MissingValueMethod, self.missing_value_method, "missing value"
        )
        self.encoding_method = parse_method(EncodingMethod, self.encoding_method, "encoding")
        self.normalization_method = parse_method(
            NormalizationMethod, self.normalization_method, "normalization"
        )

    @classmethod
    def from_dict(cls, options: Optional[Mapping[str, Any]]) -> "PreprocessOptions":
        """
        Parse request options.

        Accepts camelCase (``missingValueMethod``) or snake_case keys.

        Raises:
            ValueError: On unknown option keys
            UnknownMethodError: On unknown method names
        """
        options = options or {}
        unknown = sorted(k for k in options if k not in _OPTION_KEYS)
        if unknown:
            raise ValueError(f"Unknown preprocessing options: {unknown}")
        return cls(**{_OPTION_KEYS[k]: v for k, v in options.items()})

    @property
    def is_empty(self) -> bool:
        return not (
            self.handle_infinite
            or self.missing_value_method
            or self.encoding_method
            or self.normalization_method
        )
