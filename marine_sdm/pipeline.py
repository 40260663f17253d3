"""
Presence/absence extraction pipeline.

Load records -> build points -> extract raster values -> assemble -> write CSV.
Any failure stops the run and the original error is raised unchanged.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

import pandas as pd
import xarray as xr

from marine_sdm.occurrence import load_records, build_points
from marine_sdm.extract import extract_values, SamplingMethod
from marine_sdm.dataset import assemble_dataset, write_dataset

logger = logging.getLogger(__name__)


def run_pipeline(
    records_path: Union[str, Path],
    stack: xr.Dataset,
    output_path: Union[str, Path],
    label_column: str = "PA",
    x_column: str = "lon",
    y_column: str = "lat",
    crs: str = "EPSG:4326",
    layers: Optional[Sequence[str]] = None,
    method: SamplingMethod = SamplingMethod.NEAREST,
    sep: str = ",",
    na_rep: str = "NA",
) -> pd.DataFrame:
    """Join presence/absence records to raster values and write a CSV.

    Args:
        records_path: Delimited text file of records.
        stack: Raster stack to sample, in the same CRS as the records.
        output_path: CSV file to write. Its directory must exist.
        label_column: Presence/absence column.
        x_column: Longitude column.
        y_column: Latitude column.
        crs: CRS of the record coordinates.
        layers: Layers to sample, in output order. Defaults to all layers.
        method: Sampling method for the extraction.
        sep: Delimiter of the records file.
        na_rep: Text written for no-data values.

    Returns:
        The assembled dataset that was written.
    """
    logger.info(f"Extracting raster values for records in: {records_path}")

    records = load_records(records_path, label_column=label_column, coordinate_columns=(x_column, y_column), sep=sep)
    points = build_points(records, x_column=x_column, y_column=y_column, crs=crs, label_column=label_column)
    extracted = extract_values(stack, points, layers=layers, method=method)
    dataset = assemble_dataset(records, extracted)
    write_dataset(dataset, output_path, na_rep=na_rep)

    return dataset
