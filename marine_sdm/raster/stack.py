import logging
from pathlib import Path
from typing import Dict, Mapping, Sequence, Tuple, Union

import numpy as np
import xarray as xr
import rioxarray as rxr
from rioxarray.exceptions import NoDataInBounds

from marine_sdm.exceptions import ExtractionError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _as_2d(name: str, layer: xr.DataArray) -> xr.DataArray:
    """Drop a singleton band dimension and check the layer is a 2D grid."""
    if "band" in layer.dims:
        if layer.sizes["band"] != 1:
            raise ExtractionError(
                f"Layer '{name}' has {layer.sizes['band']} bands; pass one layer per band"
            )
        layer = layer.squeeze("band", drop=True)
    elif "band" in layer.coords:
        layer = layer.drop_vars("band")

    if layer.ndim != 2:
        raise ExtractionError(f"Layer '{name}' must be 2D, got dims {layer.dims}")
    return layer


def build_raster_stack(layers: Mapping[str, xr.DataArray]) -> xr.Dataset:
    """Combine named, co-registered grids into an ordered raster stack.

    Every layer must share the CRS, shape and transform of the first one.
    Layer order in the stack follows the mapping order.

    Args:
        layers: Mapping of layer name to a 2D (or single band) DataArray.

    Returns:
        Dataset with one data variable per layer.
    """
    if not layers:
        raise ExtractionError("Cannot build a raster stack from no layers")

    grids = {name: _as_2d(name, layer) for name, layer in layers.items()}
    ref_name, reference = next(iter(grids.items()))
    ref_crs = reference.rio.crs
    if ref_crs is None:
        raise ExtractionError(f"Layer '{ref_name}' has no CRS")
    ref_transform = reference.rio.transform()

    aligned = {}
    for name, grid in grids.items():
        if grid.rio.crs != ref_crs:
            raise ExtractionError(
                f"Layer '{name}' CRS {grid.rio.crs} does not match '{ref_name}' CRS {ref_crs}"
            )
        if grid.shape != reference.shape:
            raise ExtractionError(
                f"Layer '{name}' shape {grid.shape} does not match '{ref_name}' shape {reference.shape}"
            )
        if not grid.rio.transform().almost_equals(ref_transform):
            raise ExtractionError(f"Layer '{name}' is not aligned with '{ref_name}'")
        # Identical coordinates stop xarray from outer-joining float noise
        grid = grid.assign_coords(
            {reference.rio.x_dim: reference[reference.rio.x_dim], reference.rio.y_dim: reference[reference.rio.y_dim]}
        )
        aligned[name] = grid.rename(name)

    stack = xr.Dataset(aligned)
    stack.rio.write_crs(ref_crs, inplace=True)
    logger.info(f"Built raster stack with {len(aligned)} layers: {list(aligned)}")
    return stack


def _band_names(prefix: str, data: xr.DataArray) -> list:
    # Multi-band files take their names from the band long names, as written by GDAL
    long_name = data.attrs.get("long_name")
    if isinstance(long_name, str):
        long_name = [long_name]
    if long_name is not None and len(long_name) == data.sizes["band"]:
        return [f"{prefix}_{name}" for name in long_name]
    return [f"{prefix}_{band}" for band in data["band"].values]


def load_raster_stack(paths: Union[Sequence[PathLike], Mapping[str, PathLike]]) -> xr.Dataset:
    """Load local rasters into a raster stack.

    Single band files are named after the file stem (or the mapping key).
    Multi-band files get one layer per band, prefixed the same way.
    No-data cells are read as NaN.

    Args:
        paths: Sequence of raster paths, or a mapping of layer name to path.

    Returns:
        Raster stack Dataset.
    """
    if isinstance(paths, Mapping):
        named = [(name, Path(path)) for name, path in paths.items()]
    else:
        named = [(None, Path(path)) for path in paths]

    layers: Dict[str, xr.DataArray] = {}
    for name, path in named:
        if not path.exists():
            raise FileNotFoundError(f"Raster file not found: {path}")
        data = rxr.open_rasterio(path, masked=True)
        if not isinstance(data, xr.DataArray):
            raise ExtractionError(f"Expected a single raster in {path}, got {type(data)}")

        if data.sizes.get("band", 1) == 1:
            layers[name or path.stem] = data
        else:
            for band, band_name in zip(data["band"].values, _band_names(name or path.stem, data)):
                layers[band_name] = data.sel(band=band)
        logger.debug(f"Opened {path}")

    return build_raster_stack(layers)


def crop_stack(
    stack: xr.Dataset,
    bbox: Tuple[float, float, float, float],
    crs: str = "EPSG:4326",
) -> xr.Dataset:
    """Crop a raster stack to a region of interest.

    Args:
        stack: Raster stack to crop.
        bbox: (minx, miny, maxx, maxy) of the region of interest.
        crs: CRS of the bounding box.

    Returns:
        Cropped raster stack covering the cells that touch the box.
    """
    minx, miny, maxx, maxy = bbox
    if not (np.isfinite(bbox).all() and minx < maxx and miny < maxy):
        raise ExtractionError(f"Invalid region of interest {bbox}")
    try:
        cropped = stack.rio.clip_box(minx, miny, maxx, maxy, crs=crs, auto_expand=True)
    except NoDataInBounds as e:
        raise ExtractionError(f"Region of interest {bbox} does not overlap the raster stack") from e
    logger.info(
        f"Cropped raster stack from {stack.rio.width}x{stack.rio.height} "
        f"to {cropped.rio.width}x{cropped.rio.height} cells"
    )
    return cropped
