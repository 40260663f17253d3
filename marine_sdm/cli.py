# Command Line Interface for marine-sdm
import logging
from pathlib import Path
from typing import List, Optional, Tuple

import requests
import typer
from typing_extensions import Annotated

from marine_sdm.exceptions import ExtractionError, FormatError, ValidationError
from marine_sdm.extract import SamplingMethod
from marine_sdm.utils.io import DEFAULT_CONFIG_PATH, load_config, merge_options
from marine_sdm.utils.logging_utils import setup_logging

app = typer.Typer(
    name="marine-sdm",
    help="Join presence/absence survey points to marine environmental rasters",
    add_completion=False,
)

logger = logging.getLogger(__name__)

PIPELINE_ERRORS = (FormatError, ValidationError, ExtractionError, OSError, requests.RequestException)


@app.command()
def extract(
    records_path: Annotated[
        Path,
        typer.Option(
            "--records",
            help="Presence/absence CSV with a label column and lon/lat columns.",
            exists=True, dir_okay=False, readable=True, resolve_path=True,
        )
    ],
    output_path: Annotated[
        Path,
        typer.Option("--output", "-o", help="CSV file to write.", dir_okay=False, resolve_path=True)
    ],
    rasters: Annotated[
        Optional[List[Path]],
        typer.Option("--raster", "-r", help="Local raster file; repeat for more layers.", exists=True, dir_okay=False)
    ] = None,
    layer_codes: Annotated[
        Optional[List[str]],
        typer.Option("--layer", "-l", help="Remote layer code; repeat for more layers.")
    ] = None,
    cache_dir: Annotated[
        Optional[Path],
        typer.Option(help="Folder remote layers are cached in.", file_okay=False)
    ] = None,
    bbox: Annotated[
        Optional[Tuple[float, float, float, float]],
        typer.Option(help="Region of interest: minx miny maxx maxy.")
    ] = None,
    method: Annotated[
        Optional[SamplingMethod],
        typer.Option(help="Raster sampling method.")
    ] = None,
    config_path: Annotated[
        Path,
        typer.Option("--config", help="YAML configuration file.", exists=True, dir_okay=False)
    ] = DEFAULT_CONFIG_PATH,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose logging.")] = False,
) -> None:
    """
    Samples every raster layer at each record's location and writes the
    records with one extra column per layer.
    """
    from marine_sdm.data import fetch_layers
    from marine_sdm.data.catalog import DEFAULT_BASE_URL
    from marine_sdm.pipeline import run_pipeline
    from marine_sdm.raster import build_raster_stack, crop_stack, load_raster_stack

    setup_logging(verbose=verbose)
    config = load_config(config_path)
    record_options = merge_options(config, "records")
    catalog_options = merge_options(config, "catalog", cache_folder=cache_dir)
    method = method or merge_options(config, "extraction").get("method", SamplingMethod.NEAREST)
    region = bbox if bbox and None not in bbox else config.get("region")

    try:
        layers = {}
        if rasters:
            local = load_raster_stack(rasters)
            layers.update({name: local[name] for name in local.data_vars})
        if layer_codes:
            remote = fetch_layers(
                layer_codes,
                catalog_options.get("cache_folder", "data/raw/layer_cache"),
                base_url=catalog_options.get("base_url", DEFAULT_BASE_URL),
                timeout=catalog_options.get("timeout", 120),
            )
            layers.update({name: remote[name] for name in remote.data_vars})
        stack = build_raster_stack(layers)

        if region:
            stack = crop_stack(stack, tuple(region), crs=config.get("region_crs", "EPSG:4326"))

        run_pipeline(
            records_path,
            stack,
            output_path,
            label_column=record_options.get("label_column", "PA"),
            x_column=record_options.get("x_column", "lon"),
            y_column=record_options.get("y_column", "lat"),
            crs=record_options.get("crs", "EPSG:4326"),
            method=method,
            sep=record_options.get("sep", ","),
            na_rep=str(merge_options(config, "output").get("na_rep", "NA")),
        )
    except PIPELINE_ERRORS as e:
        logger.error(f"Extraction failed: {e}")
        raise typer.Exit(code=1)


@app.command()
def fetch(
    layer_codes: Annotated[List[str], typer.Argument(help="Remote layer codes to download.")],
    cache_dir: Annotated[
        Optional[Path],
        typer.Option(help="Folder remote layers are cached in.", file_okay=False)
    ] = None,
    config_path: Annotated[
        Path,
        typer.Option("--config", help="YAML configuration file.", exists=True, dir_okay=False)
    ] = DEFAULT_CONFIG_PATH,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose logging.")] = False,
) -> None:
    """
    Downloads remote layers into the cache folder without extracting anything.
    """
    from marine_sdm.data import LayerCatalog
    from marine_sdm.data.catalog import DEFAULT_BASE_URL

    setup_logging(verbose=verbose)
    catalog_options = merge_options(load_config(config_path), "catalog", cache_folder=cache_dir)
    catalog = LayerCatalog(
        base_url=catalog_options.get("base_url", DEFAULT_BASE_URL),
        cache_folder=catalog_options.get("cache_folder", "data/raw/layer_cache"),
        timeout=catalog_options.get("timeout", 120),
    )
    for code in layer_codes:
        try:
            path = catalog.download_layer(code)
        except (requests.RequestException, OSError, ValueError) as e:
            logger.error(f"Could not fetch layer {code}: {e}")
            raise typer.Exit(code=1)
        typer.echo(f"{code}\t{path}")


if __name__ == "__main__":
    app()
