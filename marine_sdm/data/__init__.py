"""
Remote data access.
"""

from .catalog import LayerCatalog, fetch_layers

__all__ = [
    'LayerCatalog',
    'fetch_layers',
]
