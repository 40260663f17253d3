"""
Sampling raster stack values at point locations.
"""

import logging
from enum import StrEnum
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd
import geopandas as gpd
import xarray as xr
import rioxarray as rxr  # Required for .rio accessor, even if not directly called
from pyproj import CRS
from rasterio.transform import rowcol

from marine_sdm.exceptions import ExtractionError

logger = logging.getLogger(__name__)


class SamplingMethod(StrEnum):
    NEAREST = "nearest"
    LINEAR = "linear"


def _check_inputs(stack: xr.Dataset, points: gpd.GeoDataFrame, layers: Optional[Sequence[str]]) -> List[str]:
    if len(stack.data_vars) == 0:
        raise ExtractionError("Raster stack has no layers")
    if len(points) == 0:
        raise ExtractionError("No points to extract values for")

    stack_crs = stack.rio.crs
    if stack_crs is None:
        raise ExtractionError("Raster stack has no CRS")
    if points.crs is None:
        raise ExtractionError("Points have no CRS")
    if not CRS.from_user_input(points.crs).equals(CRS.from_wkt(stack_crs.to_wkt()), ignore_axis_order=True):
        raise ExtractionError(
            f"Points CRS {points.crs.to_string()} does not match raster stack CRS {stack_crs.to_string()}; "
            "reproject the points first"
        )

    if layers is None:
        return list(stack.data_vars)
    layers = list(layers)
    if not layers:
        raise ExtractionError("Raster stack has no layers")
    unknown = [layer for layer in layers if layer not in stack.data_vars]
    if unknown:
        raise ExtractionError(f"Layers {unknown} not in raster stack {list(stack.data_vars)}")
    return layers


def _as_grid(stack: xr.Dataset, name: str) -> xr.DataArray:
    layer = stack[name]
    if "band" in layer.dims and layer.sizes["band"] == 1:
        layer = layer.squeeze("band", drop=True)
    if layer.ndim != 2:
        raise ExtractionError(f"Layer '{name}' must be 2D, got dims {layer.dims}")
    return layer.transpose(layer.rio.y_dim, layer.rio.x_dim)


def _mask_nodata(layer: xr.DataArray) -> xr.DataArray:
    nodata = layer.rio.nodata
    if nodata is None or np.isnan(nodata):
        return layer
    return layer.where(layer != nodata)


def sample_nearest(layer: xr.DataArray, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    """Read the value of the cell containing each point.

    Cells are half-open, so a point on the right or bottom edge of the
    raster is outside it. Points outside the raster get NaN.
    """
    height, width = layer.shape
    rows, cols = rowcol(layer.rio.transform(), xs, ys, op=np.floor)
    rows = np.asarray(rows, dtype=int)
    cols = np.asarray(cols, dtype=int)
    inside = (rows >= 0) & (rows < height) & (cols >= 0) & (cols < width)

    values = np.full(len(xs), np.nan)
    grid = _mask_nodata(layer).values
    values[inside] = grid[rows[inside], cols[inside]]
    return values


def sample_linear(layer: xr.DataArray, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    """Bilinear interpolation between cell centres.

    Points outside the cell-centre grid, or next to a no-data cell, get NaN.
    """
    x_dim, y_dim = layer.rio.x_dim, layer.rio.y_dim
    layer = _mask_nodata(layer).sortby(y_dim).sortby(x_dim)
    sampled = layer.interp(
        {x_dim: xr.DataArray(xs, dims="point"), y_dim: xr.DataArray(ys, dims="point")},
        method="linear",
    )
    return sampled.values.astype(float)


SAMPLERS = {
    SamplingMethod.NEAREST: sample_nearest,
    SamplingMethod.LINEAR: sample_linear,
}


def extract_values(
    stack: xr.Dataset,
    points: gpd.GeoDataFrame,
    layers: Optional[Sequence[str]] = None,
    method: SamplingMethod = SamplingMethod.NEAREST,
) -> pd.DataFrame:
    """Sample every layer of a raster stack at every point.

    A point outside the raster, or on a no-data cell, gets NaN for that
    layer; it never stops the other points being sampled.

    Args:
        stack: Raster stack, one 2D data variable per layer.
        points: Points in the same CRS as the stack.
        layers: Layers to sample, in output column order. Defaults to every
            layer in stack order.
        method: Sampling method. Nearest cell by default.

    Returns:
        DataFrame with one row per point (same order, positional index) and
        one column per layer.

    Raises:
        ExtractionError: For empty inputs, unknown layers or a CRS mismatch.
    """
    method = SamplingMethod(method)
    layer_names = _check_inputs(stack, points, layers)
    sampler = SAMPLERS[method]

    xs = points.geometry.x.to_numpy(dtype=float)
    ys = points.geometry.y.to_numpy(dtype=float)

    columns = {}
    for name in layer_names:
        values = sampler(_as_grid(stack, name), xs, ys)
        n_missing = int(np.isnan(values).sum())
        if n_missing:
            logger.warning(f"Layer '{name}': {n_missing} of {len(values)} points outside the raster or on no-data")
        columns[name] = values

    extracted = pd.DataFrame(columns, index=pd.RangeIndex(len(points)), columns=layer_names)
    logger.info(f"Extracted {len(layer_names)} layers at {len(points)} points using {method} sampling")
    return extracted
