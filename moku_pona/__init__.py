"""
moku-pona Package

Watches Gopher menus and feeds for changes and keeps an update log
in Gopher menu format.
"""

__version__ = "1.0.0"

# Package-level imports for convenience
from .config_manager import ConfigManager, DataPaths
from .gopher_fetcher import GopherFetcher
from .line_codec import Item
from .storage_manager import StorageManager

__all__ = [
    'ConfigManager',
    'DataPaths',
    'GopherFetcher',
    'Item',
    'StorageManager',
]
