from .io import load_config, DEFAULT_CONFIG_PATH
from .logging_utils import setup_logging

__all__ = [
    "load_config",
    "DEFAULT_CONFIG_PATH",
    "setup_logging",
]
