"""
Dataset Export

Serializes a dataset snapshot, raw or preprocessed, back to delimited text
for download.
"""

from pathlib import Path
from typing import Any, Iterable, Mapping, Union

from loguru import logger

from analysis import Dataset

from .transformer import as_dataset


def export_delimited(
    data: Union[Dataset, Iterable[Mapping[str, Any]]],
    delimiter: str = ",",
    include_header: bool = True,
) -> str:
    """
    Serialize rows to delimited text.

    Missing cells are written as empty fields; columns follow the snapshot's
    column order.

    Args:
        data: Dataset snapshot or row records
        delimiter: Single-character field separator
        include_header: Whether to write the header line

    Returns:
        Delimited text with a trailing newline

    Raises:
        ValueError: If ``delimiter`` is not a single character
    """
    if not isinstance(delimiter, str) or len(delimiter) != 1:
        raise ValueError(f"Delimiter must be a single character, got {delimiter!r}")

    dataset = as_dataset(data)
    frame = dataset.to_frame()

    logger.info("Exporting {} rows, {} columns", dataset.row_count, dataset.column_count)
    return frame.to_csv(index=False, sep=delimiter, header=include_header, lineterminator="\n")


def export_filename(source_name: str, extension: str = "csv") -> str:
    """Download name for a refined dataset: ``refined_<stem>.<extension>``."""
    return f"refined_{Path(source_name).stem}.{extension}"
