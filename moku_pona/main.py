"""
Main entry point for moku-pona.
Orchestrates subscriptions, updates, cleanup and publishing.
"""
import argparse
import logging
import os
import shutil
import sys
import time
from typing import Dict, List, Any, Optional, Set

from json.decoder import JSONDecodeError
from dotenv import load_dotenv

from moku_pona import __version__
from moku_pona.config_manager import ConfigManager
from moku_pona.gopher_fetcher import GopherFetcher
from moku_pona.line_codec import Item, decode, encode, feed_to_lines, item_to_url, split_record, url_to_item
from moku_pona.storage_manager import StorageManager
from moku_pona.update_log import prune, record_update
from moku_pona.utils.helpers import join_lines
from moku_pona.utils.logging_utils import setup_logging, log_update_summary, log_cleanup_results

logger = logging.getLogger(__name__)

XML_DECLARATION = b"<?xml"

COMMANDS = ("add", "remove", "list", "cleanup", "update", "publish")

UPDATED = "updated"
UNCHANGED = "unchanged"
ERROR = "error"


class MokuPona:
    """
    Main class wiring storage, fetcher and update log together.
    """

    def __init__(self, config_manager: ConfigManager, fetcher: Optional[GopherFetcher] = None):
        """
        Initialize with configuration.

        Args:
            config_manager: Loaded configuration
            fetcher: Fetcher to use; built from the networking settings when None
        """
        self.config_manager = config_manager
        self.paths = config_manager.paths
        self.storage_manager = StorageManager(self.paths)
        self.fetcher = fetcher or GopherFetcher(
            timeout=config_manager.get_config_value("networking.timeout_seconds", 10)
        )
        logger.debug(f"moku-pona initialized with data directory {self.paths.data_dir}")

    def _load_items(self) -> List[Item]:
        items = []
        for line in self.storage_manager.load_site_list():
            try:
                items.append(decode(line))
            except ValueError as e:
                logger.warning(f"Skipping malformed site list entry: {e}")
        return items

    def _cache_name(self, item: Item) -> str:
        return self.paths.cache_name(item.host, item.port, item.selector)

    def _active_caches(self, items: List[Item]) -> Set[str]:
        return {self._cache_name(item) for item in items}

    def add(self, url: str, name: Optional[str] = None) -> bool:
        """
        Subscribe to a Gopher URL.

        Args:
            url: Gopher URL or bare host
            name: Description to use instead of the URL

        Returns:
            True if the item was added
        """
        item = url_to_item(url, name)
        if item is None:
            logger.warning(f"Not adding '{url}': not a gopher URL")
            return False

        line = encode(item)
        lines = self.storage_manager.load_site_list()
        if line in lines:
            logger.warning(f"Already subscribed to '{item.description}'")
            return False

        lines.append(line)
        self.storage_manager.save_site_list(lines)
        logger.info(f"Subscribed to '{item.description}'")
        return True

    def remove(self, names: List[str]) -> int:
        """
        Unsubscribe from every item whose description is one of the names.

        Returns:
            Number of items removed
        """
        wanted = set(names)
        kept = []
        removed = 0
        for line in self.storage_manager.load_site_list():
            try:
                description = decode(line).description
            except ValueError:
                kept.append(line)
                continue
            if description in wanted:
                removed += 1
            else:
                kept.append(line)

        if removed:
            self.storage_manager.save_site_list(kept)
        logger.info(f"Removed {removed} items")
        return removed

    def list_sites(self) -> List[str]:
        """Describe each subscribed item as 'description (url)'."""
        return [f"{item.description} ({item_to_url(item)})" for item in self._load_items()]

    def update(self, quiet: bool = False) -> Dict[str, Any]:
        """
        Fetch every subscribed item and record the ones that changed.

        Args:
            quiet: Suppress the per-item output

        Returns:
            dict: Report with per-item statuses and counts
        """
        start_time = time.time()
        report = {"items": [], UPDATED: 0, UNCHANGED: 0, "errors": 0}

        for item in self._load_items():
            status = self._update_item(item)
            report["items"].append((item.description, status))
            if status == ERROR:
                report["errors"] += 1
            else:
                report[status] += 1

            if not quiet:
                print(f"{item.description}:" if status == ERROR else f"{item.description}: {status}")

        log_update_summary(logger, report, time.time() - start_time)
        return report

    def _update_item(self, item: Item) -> str:
        content = self.fetcher.fetch(item.selector, item.host, item.port)
        if content is None:
            return ERROR

        cache_name = self._cache_name(item)
        if content.startswith(XML_DECLARATION):
            lines = feed_to_lines(content, item.host, item.port)
            content = join_lines(lines).encode("utf-8")
            record_line = encode(item.as_feed(cache_name))
        else:
            record_line = encode(item)

        try:
            if content == self.storage_manager.load_cache(cache_name):
                return UNCHANGED

            # cache first, so a failed write never leaves a record without a cache
            self.storage_manager.save_cache(cache_name, content)
            log = record_update(self.storage_manager.load_update_log(), record_line)
            self.storage_manager.save_update_log(log)
        except OSError as e:
            logger.warning(f"Cannot store update for '{item.description}': {e}")
            return ERROR

        logger.info(f"'{item.description}' changed")
        return UPDATED

    def cleanup(self, confirm: bool = False) -> Dict[str, List[str]]:
        """
        Remove caches and update records of items no longer subscribed.

        Without confirm nothing is deleted; the result lists what would be.

        Returns:
            dict: Stale cache names and stale update log lines
        """
        items = self._load_items()
        site_lines = {encode(item) for item in items}
        active_caches = self._active_caches(items)

        stale_caches = [name for name in self.storage_manager.list_cache_files() if name not in active_caches]

        def subscribed(line: str) -> bool:
            if line in site_lines:
                return True
            try:
                return decode(line, active_caches).is_feed
            except ValueError:
                return True

        log = self.storage_manager.load_update_log()
        kept, stale_records = prune(log, subscribed)

        if confirm:
            for name in stale_caches:
                self.storage_manager.remove_cache(name)
            if stale_records:
                self.storage_manager.save_update_log(kept)

        log_cleanup_results(logger, len(stale_caches), len(stale_records), confirm)
        return {"caches": stale_caches, "records": stale_records}

    def publish(self, target_dir: str) -> List[str]:
        """
        Copy the site list, the update log and the feed caches to a directory.

        Raises:
            FileNotFoundError: If the target directory or either list is missing.

        Returns:
            Paths of the copied files
        """
        if not os.path.isdir(target_dir):
            raise FileNotFoundError(f"Target directory does not exist: {target_dir}")
        for required in (self.paths.site_list, self.paths.update_log):
            if not os.path.exists(required):
                raise FileNotFoundError(f"Nothing to publish, missing {required}")

        sources = [self.paths.site_list, self.paths.update_log]
        active_caches = self._active_caches(self._load_items())
        for line in self.storage_manager.load_update_log():
            kind, date, rest = split_record(line)
            if date is None:
                continue
            try:
                item = decode(kind + rest, active_caches)
            except ValueError:
                continue
            cache_path = self.paths.cache_path(item.selector)
            if item.is_feed and os.path.exists(cache_path) and cache_path not in sources:
                sources.append(cache_path)

        copied = []
        for source in sources:
            copied.append(shutil.copy(source, os.path.join(target_dir, os.path.basename(source))))
            logger.debug(f"Published {source}")

        logger.info(f"Published {len(copied)} files to {target_dir}")
        return copied


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="moku-pona",
        description="moku-pona - Watch Gopher menus and feeds for changes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  moku-pona add gopher://gopher.club/1phlogs "Gopher Club"
  moku-pona remove "Gopher Club"
  moku-pona list
  moku-pona update --quiet
  moku-pona cleanup --confirm
  moku-pona publish ~/public_gopher/moku-pona

The data directory is $MOKU_PONA, else ~/.moku-pona.
        """
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"moku-pona v{__version__}")

    commands = parser.add_subparsers(dest="command")

    add = commands.add_parser("add", help="Subscribe to a gopher URL")
    add.add_argument("url", help="Gopher URL or host name")
    add.add_argument("name", nargs="?", help="Description (default: the URL)")

    remove = commands.add_parser("remove", help="Unsubscribe by description")
    remove.add_argument("names", nargs="+", help="Descriptions of the items to remove")

    commands.add_parser("list", help="List subscriptions")

    cleanup = commands.add_parser("cleanup", help="Delete caches and updates of removed items")
    cleanup.add_argument("--confirm", action="store_true", help="Actually delete; default is a dry run")

    update = commands.add_parser("update", help="Fetch all subscriptions and record changes")
    update.add_argument("--quiet", action="store_true", help="Do not print per-item status")

    publish = commands.add_parser("publish", help="Copy the lists and feed caches to a directory")
    publish.add_argument("directory", help="Existing target directory")

    return parser


def run_command(app: MokuPona, args: argparse.Namespace) -> None:
    if args.command == "add":
        if app.add(args.url, args.name):
            print(f"Added {args.name or args.url}")
    elif args.command == "remove":
        count = app.remove(args.names)
        print(f"Removed {count} {'item' if count == 1 else 'items'}")
    elif args.command == "list":
        print(f"Subscribed items in {app.paths.site_list}:")
        sites = app.list_sites()
        for site in sites:
            print(site)
        if not sites:
            print("none")
    elif args.command == "cleanup":
        result = app.cleanup(confirm=args.confirm)
        verb = "Deleted" if args.confirm else "Would delete"
        for name in result["caches"]:
            print(f"{verb} cache {name}")
        for line in result["records"]:
            title = line.split("\t", 1)[0][1:]
            print(f"{verb} update {title}")
        if not args.confirm and (result["caches"] or result["records"]):
            print("Use --confirm to delete them")
    elif args.command == "update":
        app.update(quiet=args.quiet)
    elif args.command == "publish":
        for path in app.publish(args.directory):
            print(f"Copied {path}")


def main(argv: Optional[List[str]] = None):
    """
    Main entry point for the script.
    """
    parser = build_parser()
    if argv is None:
        argv = sys.argv[1:]

    # global options take no values, so the first positional is the command
    command = next((arg for arg in argv if not arg.startswith("-")), None)
    if command is not None and command not in COMMANDS:
        print(f"Unknown command: {command}")
        parser.print_help()
        return

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    load_dotenv()

    try:
        config_manager = ConfigManager()
    except (ValueError, TypeError, JSONDecodeError, OSError) as e:
        setup_logging(log_level='DEBUG' if args.debug else 'WARNING')
        logger.critical(f"Invalid configuration: {e}")
        sys.exit(1)

    log_level = 'DEBUG' if args.debug else config_manager.get_config_value("logging.level", "WARNING")
    setup_logging(log_level=log_level, log_dir=config_manager.get_config_value("logging.log_dir"))

    try:
        run_command(MokuPona(config_manager), args)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(1)
    except OSError as e:
        logger.critical(f"{e}", exc_info=args.debug)
        sys.exit(1)


if __name__ == "__main__":
    main()
