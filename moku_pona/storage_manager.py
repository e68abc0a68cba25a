"""
Storage Manager module for the site list, the update log and the cache files.
"""
import logging
import os
from typing import List

from moku_pona.config_manager import DataPaths
from moku_pona.utils.helpers import is_info_line, join_lines, split_lines

logger = logging.getLogger(__name__)


class StorageManager:
    """
    Reads and writes the flat files kept in the data directory.
    """

    def __init__(self, paths: DataPaths):
        """
        Initialize the storage manager.

        Args:
            paths: Data directory and file locations
        """
        self.paths = paths
        logger.debug(f"StorageManager initialized with data directory: {paths.data_dir}")

    def _read_lines(self, file_path: str) -> List[str]:
        if not os.path.exists(file_path):
            logger.debug(f"No file found: {file_path}")
            return []

        with open(file_path, 'r', encoding='utf-8', newline='') as f:
            return split_lines(f.read())

    def _write_lines(self, file_path: str, lines: List[str]) -> None:
        os.makedirs(os.path.dirname(file_path) or '.', exist_ok=True)
        with open(file_path, 'w', encoding='utf-8', newline='') as f:
            f.write(join_lines(lines))
        logger.debug(f"Saved {len(lines)} lines to {file_path}")

    def load_site_list(self) -> List[str]:
        """
        Load the subscribed items.

        Returns:
            Menu lines without terminators; informational lines are dropped
        """
        return [line for line in self._read_lines(self.paths.site_list) if not is_info_line(line)]

    def save_site_list(self, lines: List[str]) -> None:
        self._write_lines(self.paths.site_list, lines)

    def load_update_log(self) -> List[str]:
        """
        Load the update log.

        Returns:
            Lines without terminators, informational lines included
        """
        return self._read_lines(self.paths.update_log)

    def save_update_log(self, lines: List[str]) -> None:
        self._write_lines(self.paths.update_log, lines)

    def load_cache(self, name: str) -> bytes:
        """
        Load a cached response.

        Args:
            name: Cache file name relative to the data directory

        Returns:
            Cached bytes, or empty bytes if there is no cache yet
        """
        file_path = self.paths.cache_path(name)
        if not os.path.exists(file_path):
            return b""

        with open(file_path, 'rb') as f:
            return f.read()

    def save_cache(self, name: str, content: bytes) -> None:
        file_path = self.paths.cache_path(name)
        os.makedirs(os.path.dirname(file_path) or '.', exist_ok=True)
        with open(file_path, 'wb') as f:
            f.write(content)
        logger.debug(f"Saved {len(content)} bytes to {file_path}")

    def list_cache_files(self) -> List[str]:
        """
        List the cache files in the data directory.

        Returns:
            Sorted file names, excluding the site list and the update log
        """
        if not os.path.isdir(self.paths.data_dir):
            return []

        own_files = {os.path.basename(self.paths.site_list), os.path.basename(self.paths.update_log)}
        names = []
        for filename in os.listdir(self.paths.data_dir):
            if not filename.endswith('.txt') or filename in own_files:
                continue
            if os.path.isfile(os.path.join(self.paths.data_dir, filename)):
                names.append(filename)
        return sorted(names)

    def remove_cache(self, name: str) -> None:
        os.remove(self.paths.cache_path(name))
        logger.debug(f"Removed cache file: {name}")
