"""
Helper functions for moku-pona.
Contains utility functions for line handling, dates and file names.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

logger = logging.getLogger(__name__)

# Gopher menus and the files written by moku-pona use CRLF line endings
LINE_TERMINATOR = "\r\n"

DATE_FORMAT = "%Y-%m-%d"
DATE_LENGTH = 10


def today_utc() -> str:
    """
    Get today's date in UTC.

    Returns:
        Date string in YYYY-MM-DD format
    """
    return datetime.now(timezone.utc).strftime(DATE_FORMAT)


def parse_date(text: str) -> Optional[str]:
    """
    Check whether a string is exactly a YYYY-MM-DD date.

    Args:
        text: Candidate date string

    Returns:
        The date string if valid, None otherwise
    """
    if not text or len(text) != DATE_LENGTH:
        return None
    try:
        datetime.strptime(text, DATE_FORMAT)
    except ValueError:
        return None
    return text


def split_lines(text: str) -> List[str]:
    """
    Split file content into records, stripping line terminators.

    Both CRLF and bare LF are accepted so hand-edited files still load.
    """
    if not text:
        return []
    return [line.rstrip("\r") for line in text.split("\n") if line.rstrip("\r")]


def join_lines(lines: List[str]) -> str:
    """Join records with CRLF, ending with a trailing terminator."""
    if not lines:
        return ""
    return LINE_TERMINATOR.join(lines) + LINE_TERMINATOR


def is_info_line(line: str) -> bool:
    return line.startswith("i")


def selector_to_filename(selector: str) -> str:
    """
    Make a selector usable as part of a file name.

    Args:
        selector: Gopher selector, possibly containing slashes

    Returns:
        Selector with every slash replaced by a hyphen
    """
    return selector.replace("/", "-")
