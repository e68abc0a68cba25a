"""
Update log merging.

The update log is a Gopher menu: informational header lines first, then one
dated record per item, most recently updated first. A record looks like
``1YYYY-MM-DD description<TAB>selector<TAB>host<TAB>port``.

Older versions wrote a different layout where a date header
(``iYYYY-MM-DD<TAB>...``) was followed by undated items. Such logs are
migrated on the next update.
"""
import logging
from typing import Callable, List, Optional, Tuple

from moku_pona.line_codec import DIRECTORY_KIND, split_record
from moku_pona.utils.helpers import is_info_line, parse_date, today_utc

logger = logging.getLogger(__name__)


def _header_date(line: str) -> Optional[str]:
    # i<date>\t...
    if not is_info_line(line):
        return None
    return parse_date(line[1:].split("\t", 1)[0])


def _is_undated_directory(line: str) -> bool:
    kind, date, _ = split_record(line)
    return kind == DIRECTORY_KIND and date is None


def is_legacy(lines: List[str]) -> bool:
    """
    Detect the old layout: a date header immediately followed by an undated item.
    """
    for line, following in zip(lines, lines[1:]):
        if _header_date(line) and _is_undated_directory(following):
            return True
    return False


def migrate_legacy(lines: List[str]) -> List[str]:
    """
    Rewrite a log in the old layout into dated records.

    Lines that are neither date headers nor directory items are dropped.
    A log that is not in the old layout is returned unchanged.

    Args:
        lines: Update log lines

    Returns:
        Migrated lines
    """
    if not is_legacy(lines):
        return lines

    logger.info("Migrating update log from the old date header layout")
    migrated = []
    current_date = None
    for line in lines:
        date = _header_date(line)
        if date:
            current_date = date
        elif line.startswith(DIRECTORY_KIND) and current_date:
            migrated.append(f"{DIRECTORY_KIND}{current_date} {line[1:]}")
    logger.info(f"Migrated {len(migrated)} of {len(lines)} update log lines")
    return migrated


def make_record(item_line: str, date: str) -> str:
    """Insert the date between the kind and the description of a menu line."""
    return f"{item_line[0]}{date} {item_line[1:]}"


def record_update(lines: List[str], item_line: str, today: Optional[str] = None) -> List[str]:
    """
    Put a dated record for an item at the top of the update log.

    The record goes right after the leading informational lines, and every
    older record for the same item is removed.

    Args:
        lines: Current update log lines
        item_line: Menu line of the item that changed
        today: Date to use; defaults to the current UTC date

    Returns:
        The new update log lines
    """
    if not item_line:
        raise ValueError("Cannot record an update for an empty line")

    date = today or today_utc()
    record = make_record(item_line, date)
    kind, rest = item_line[0], item_line[1:]

    lines = migrate_legacy(lines)

    position = 0
    while position < len(lines) and is_info_line(lines[position]):
        position += 1

    def same_item(line: str) -> bool:
        line_kind, line_date, line_rest = split_record(line)
        return line_date is not None and line_kind == kind and line_rest == rest

    remaining = [line for line in lines[position:] if not same_item(line)]
    removed = len(lines) - position - len(remaining)
    if removed:
        description = rest.split("\t", 1)[0]
        logger.debug(f"Removed {removed} older records for '{description}'")

    return lines[:position] + [record] + remaining


def prune(lines: List[str], keep: Callable[[str], bool]) -> Tuple[List[str], List[str]]:
    """
    Split the update log into records to keep and records to drop.

    Args:
        lines: Update log lines
        keep: Predicate called with the undated menu line of each record

    Returns:
        Tuple of (kept lines, removed lines); informational and undated lines are always kept
    """
    kept, removed = [], []
    for line in lines:
        kind, date, rest = split_record(line)
        if date is None or is_info_line(line) or keep(kind + rest):
            kept.append(line)
        else:
            removed.append(line)
    return kept, removed
