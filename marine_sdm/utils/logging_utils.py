import logging
import sys

def setup_logging(level=logging.INFO, verbose: bool = False):
    """Send marine-sdm log records to stdout for the `marine-sdm` commands.

    Module loggers under `marine_sdm` report record counts, layers sampled
    and points that fell outside the rasters; `verbose` adds per-file debug
    lines. The rasterio and urllib3 loggers stay at WARNING.
    """
    log_level = logging.DEBUG if verbose else level
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )
    # GDAL bindings are chatty at debug level
    logging.getLogger("rasterio").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
