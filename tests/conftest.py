import pytest
import numpy as np
import pandas as pd
import xarray as xr
import rioxarray as rxr  # Required for .rio accessor, even if not directly called

from marine_sdm.raster import build_raster_stack


def make_layer(values: np.ndarray, name: str, nodata=None, top: float = 54.0, left: float = 0.0) -> xr.DataArray:
    """Create a 1 degree grid in EPSG:4326 with its top left corner at (left, top)."""
    height, width = values.shape
    x = left + 0.5 + np.arange(width)
    y = top - 0.5 - np.arange(height)
    layer = xr.DataArray(values, coords={"y": y, "x": x}, dims=("y", "x"), name=name)
    layer = layer.rio.write_crs("EPSG:4326")
    if nodata is not None:
        layer = layer.rio.write_nodata(nodata)
    return layer


@pytest.fixture
def sst() -> xr.DataArray:
    """Sea surface temperature, 0..15 row by row over lon 0..4, lat 50..54."""
    return make_layer(np.arange(16, dtype=float).reshape(4, 4), "sst")


@pytest.fixture
def salinity() -> xr.DataArray:
    """Salinity, 30..45 row by row on the same grid as sst."""
    return make_layer(30 + np.arange(16, dtype=float).reshape(4, 4), "salinity")


@pytest.fixture
def raster_stack(sst: xr.DataArray, salinity: xr.DataArray) -> xr.Dataset:
    return build_raster_stack({"sst": sst, "salinity": salinity})


@pytest.fixture
def records() -> pd.DataFrame:
    """Three records inside the raster with passthrough metadata."""
    return pd.DataFrame(
        {
            "site": ["a", "b", "c"],
            "PA": [1, 0, 1],
            "lon": [0.5, 2.2, 3.9],
            "lat": [53.5, 51.7, 50.1],
            "x": [55660.0, 244904.0, 434148.0],
            "y": [7087311.0, 6745000.0, 6485000.0],
        }
    )


@pytest.fixture
def records_path(tmp_path, records: pd.DataFrame):
    path = tmp_path / "records.csv"
    records.to_csv(path, index=False)
    return path


@pytest.fixture
def layer_factory():
    return make_layer
