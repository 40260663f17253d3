from .stack import build_raster_stack, load_raster_stack, crop_stack

__all__ = [
    "build_raster_stack",
    "load_raster_stack",
    "crop_stack",
]
