"""
Loading presence/absence records and turning them into points.
"""

import logging
from pathlib import Path
from typing import Union, Sequence, Optional

import numpy as np
import pandas as pd
import geopandas as gpd

from marine_sdm.exceptions import FormatError, ValidationError

logger = logging.getLogger(__name__)

COORDINATE_RANGES = {
    "x": (-180.0, 180.0),
    "y": (-90.0, 90.0),
}


def load_records(
    path: Union[str, Path],
    label_column: str = "PA",
    coordinate_columns: Sequence[str] = ("lon", "lat"),
    sep: str = ",",
) -> pd.DataFrame:
    """Load a presence/absence table from delimited text.

    Column names, column order and row order are kept exactly as on disk.
    Columns are read with pandas' nullable dtypes, so an integer column with
    blank cells stays integer and is written back without a decimal point.

    Args:
        path: Path to the delimited text file (header row required).
        label_column: Name of the 0/1 presence/absence column.
        coordinate_columns: Names of the longitude and latitude columns.
        sep: Column delimiter.

    Returns:
        DataFrame of records with a positional index.

    Raises:
        FileNotFoundError: If the path does not exist.
        FormatError: If the file cannot be parsed, repeats a column name or
            lacks required columns.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Record file not found: {path}")

    try:
        header = pd.read_csv(path, sep=sep, header=None, nrows=1, dtype=str).iloc[0].tolist()
        # Nullable dtypes keep integer columns with blank cells as integers
        records = pd.read_csv(path, sep=sep, dtype_backend="numpy_nullable")
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        logger.error(f"Could not parse record file {path}: {e}")
        raise FormatError(f"Record file is not valid delimited text: {e}", path=path) from e

    duplicated = sorted({column for column in header if header.count(column) > 1})
    if duplicated:
        raise FormatError(f"Record file has duplicate column names {duplicated}", path=path)

    required = [label_column, *coordinate_columns]
    missing = [column for column in required if column not in records.columns]
    if missing:
        raise FormatError("Record file is missing required columns", path=path, missing_columns=missing)

    logger.info(f"Loaded {len(records)} records with {len(records.columns)} columns from {path}")
    return records.reset_index(drop=True)


def _check_numeric(records: pd.DataFrame, column: str) -> pd.Series:
    values = pd.to_numeric(records[column], errors="coerce")
    bad = values.isna().to_numpy()
    if bad.any():
        row = int(np.flatnonzero(bad)[0])
        raise ValidationError(f"Non-numeric or missing value {records[column].iloc[row]!r}", row=row, column=column)
    return values.astype(float)


def _check_range(values: pd.Series, column: str, lower: float, upper: float) -> None:
    outside = ((values < lower) | (values > upper)).to_numpy()
    if outside.any():
        row = int(np.flatnonzero(outside)[0])
        raise ValidationError(
            f"Value {values.iloc[row]} outside [{lower}, {upper}]", row=row, column=column
        )


def build_points(
    records: pd.DataFrame,
    x_column: str = "lon",
    y_column: str = "lat",
    crs: str = "EPSG:4326",
    label_column: Optional[str] = "PA",
) -> gpd.GeoDataFrame:
    """Convert a record table into points, one per row, in the same order.

    Args:
        records: Record table from ``load_records``.
        x_column: Longitude column.
        y_column: Latitude column.
        crs: CRS identifier the coordinates are expressed in.
        label_column: Presence/absence column to check for 0/1 values.
            Pass None to skip the check.

    Returns:
        GeoDataFrame with a positional index and a point geometry per record.

    Raises:
        ValidationError: For the first non-numeric or out-of-range value.
    """
    for column in (x_column, y_column, label_column):
        if column is not None and column not in records.columns:
            raise ValidationError(f"Column '{column}' not in records")

    records = records.reset_index(drop=True)
    xs = _check_numeric(records, x_column)
    ys = _check_numeric(records, y_column)
    _check_range(xs, x_column, *COORDINATE_RANGES["x"])
    _check_range(ys, y_column, *COORDINATE_RANGES["y"])

    if label_column is not None:
        labels = _check_numeric(records, label_column)
        not_binary = ~labels.isin([0, 1]).to_numpy()
        if not_binary.any():
            row = int(np.flatnonzero(not_binary)[0])
            raise ValidationError(
                f"Label {records[label_column].iloc[row]!r} is not 0 or 1", row=row, column=label_column
            )

    points = gpd.GeoDataFrame(
        geometry=gpd.points_from_xy(xs.to_numpy(), ys.to_numpy()),
        index=records.index,
        crs=crs,
    )
    logger.debug(f"Built {len(points)} points in {crs}")
    return points
