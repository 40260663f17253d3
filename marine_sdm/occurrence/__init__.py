"""
Presence/absence record handling.
"""

from .records import load_records, build_points

__all__ = [
    'load_records',
    'build_points',
]
