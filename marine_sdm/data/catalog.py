"""
Remote environmental layer catalogue.

Layers are addressed by code, downloaded once into a cache folder and then
read from disk. This is the only part of the package that touches the network.
"""

import logging
from pathlib import Path
from typing import Sequence, Union

import requests
import xarray as xr
import rioxarray as rxr
from tqdm import tqdm

from marine_sdm.raster import load_raster_stack

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://bio-oracle.org/data/sdmpredictors/{code}_lonlat.tif"


class LayerCatalog:
    """
    Downloads environmental layers by code and caches them as GeoTIFFs.
    """
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        cache_folder: Union[str, Path] = "data/raw/layer_cache",
        timeout: float = 120,
    ):
        self.base_url = base_url
        self.cache_folder = Path(cache_folder)
        self.timeout = timeout
        self.chunk_size = 1024 * 1024
        self.cache_folder.mkdir(parents=True, exist_ok=True)

    def _url(self, code: str) -> str:
        return self.base_url.format(code=code)

    def _local_path(self, code: str) -> Path:
        if not code or Path(code).name != code:
            raise ValueError(f"Invalid layer code: {code!r}")
        return self.cache_folder / f"{code}.tif"

    def is_cached(self, code: str) -> bool:
        return self._local_path(code).exists()

    def download_layer(self, code: str) -> Path:
        """Download a layer into the cache unless it is already there."""
        cache_path = self._local_path(code)
        if cache_path.exists():
            logger.debug(f"Using cached layer {code}: {cache_path}")
            return cache_path

        url = self._url(code)
        partial_path = cache_path.with_name(cache_path.name + ".part")
        logger.info(f"Downloading layer {code} from {url}")
        try:
            with requests.get(url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                with open(partial_path, "wb") as f:
                    for chunk in response.iter_content(chunk_size=self.chunk_size):
                        f.write(chunk)
        except Exception as e:
            partial_path.unlink(missing_ok=True)
            logger.error(f"Failed to download layer {code}: {e}")
            raise

        partial_path.replace(cache_path)
        return cache_path

    def get_layer(self, code: str) -> xr.DataArray:
        """Open a cached layer, downloading it first if needed."""
        return rxr.open_rasterio(self.download_layer(code), masked=True)

    def clear_cache(self):
        for path in self.cache_folder.glob("*.tif"):
            path.unlink()


def fetch_layers(
    codes: Sequence[str],
    cache_dir: Union[str, Path],
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = 120,
) -> xr.Dataset:
    """Fetch layers by code into a cache directory and stack them.

    Args:
        codes: Layer codes, in the order the stack should have.
        cache_dir: Folder downloaded layers are cached in.
        base_url: URL template with a ``{code}`` placeholder.
        timeout: Request timeout in seconds.

    Returns:
        Raster stack with one layer per code, named after the code.
    """
    catalog = LayerCatalog(base_url=base_url, cache_folder=cache_dir, timeout=timeout)
    unique_codes = list(dict.fromkeys(codes))
    paths = {}
    for code in tqdm(unique_codes, desc="Fetching layers", disable=len(unique_codes) < 2):
        paths[code] = catalog.download_layer(code)
    return load_raster_stack(paths)
