import logging
from pathlib import Path
from typing import Union

import pandas as pd

from marine_sdm.exceptions import ExtractionError, FormatError

logger = logging.getLogger(__name__)


def assemble_dataset(records: pd.DataFrame, extracted: pd.DataFrame) -> pd.DataFrame:
    """Append the extracted layer columns to the record table, row for row.

    Rows are matched by position. Nothing is dropped, reordered or
    deduplicated, including rows where every layer is no-data.

    Args:
        records: Record table, original columns in original order.
        extracted: Extraction result, one column per layer in stack order.

    Returns:
        Record columns followed by layer columns.
    """
    if len(records) != len(extracted):
        raise ExtractionError(
            f"Cannot align {len(extracted)} extracted rows with {len(records)} records"
        )
    clashes = [column for column in extracted.columns if column in records.columns]
    if clashes:
        raise FormatError(f"Layer names {clashes} clash with existing record columns")

    dataset = pd.concat(
        [records.reset_index(drop=True), extracted.reset_index(drop=True)],
        axis=1,
    )
    logger.info(f"Assembled dataset with {len(dataset)} rows and {len(dataset.columns)} columns")
    return dataset


def write_dataset(dataset: pd.DataFrame, output_path: Union[str, Path], na_rep: str = "NA") -> Path:
    """Write the assembled dataset to CSV, overwriting any existing file.

    The parent directory must already exist.
    """
    output_path = Path(output_path)
    if not output_path.parent.is_dir():
        raise FileNotFoundError(f"Output directory does not exist: {output_path.parent}")
    try:
        dataset.to_csv(output_path, index=False, na_rep=na_rep, lineterminator="\n")
    except OSError as e:
        logger.error(f"Could not write dataset to {output_path}: {e}")
        raise
    logger.info(f"Saved dataset to: {output_path}")
    return output_path
