"""Tools for joining presence/absence survey points to marine environmental rasters."""

__version__ = "0.1.0"
