"""
Photo Sorter

Sorts photos and videos, including ones packed in zip archives, into a
``<year>/<month>/<day>`` directory tree based on their capture date.
"""

__version__ = "1.0.0"
__author__ = "Homelab Team"

from .config import Config, RunConfiguration
from .errors import (
    ConfigurationError,
    DirectoryCreateError,
    DiscoveryError,
    PathError,
    PhotoSorterError,
    RelocationError,
)
from .metadata import DateResolver
from .pipeline import PhotoSorter
from .reporter import SortReporter

__all__ = [
    'Config',
    'RunConfiguration',
    'DateResolver',
    'PhotoSorter',
    'SortReporter',
    'PhotoSorterError',
    'ConfigurationError',
    'DiscoveryError',
    'PathError',
    'DirectoryCreateError',
    'RelocationError',
]
