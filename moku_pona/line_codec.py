"""
Line codec module for Gopher menu items.
Converts between items and their tab-separated menu lines, and turns
Atom/RSS feeds into menu lines.
"""
import logging
import feedparser
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Tuple, Union
from urllib.parse import urlsplit, unquote

from moku_pona.utils.helpers import DATE_LENGTH, parse_date

logger = logging.getLogger(__name__)

DEFAULT_PORT = 70
DEFAULT_SCHEME = "gopher"
SUPPORTED_SCHEMES = ("gopher", "gophers")
DIRECTORY_KIND = "1"
HTML_KIND = "h"
# informational text and error lines
NON_ITEM_KINDS = ("i", "3")

# Item origins
DIRECT = "direct"
FEED = "feed"


@dataclass(frozen=True)
class Item:
    """
    A Gopher menu item.

    For items with origin FEED the selector names the cache file holding
    the feed converted into a menu, not a remote selector.
    """
    description: str
    selector: str
    host: str
    port: int
    kind: str = DIRECTORY_KIND
    origin: str = DIRECT

    @property
    def is_feed(self) -> bool:
        return self.origin == FEED

    def as_feed(self, cache_name: str) -> "Item":
        """Return the feed-derived variant of this item pointing at a cache file."""
        return replace(self, selector=cache_name, origin=FEED)


def encode(item: Item) -> str:
    """
    Serialize an item into a menu line.

    Args:
        item: Item to serialize

    Returns:
        Line of the form <kind><description>\\t<selector>\\t<host>\\t<port>
    """
    return "\t".join([item.kind + item.description, item.selector, item.host, str(item.port)])


def decode(line: str, feed_caches: Iterable[str] = ()) -> Item:
    """
    Parse a menu line into an item.

    Args:
        line: Tab-separated menu line
        feed_caches: Cache names identifying feed-derived items

    Returns:
        Parsed item

    Raises:
        ValueError: If the line has fewer than four fields or a bad port.
    """
    fields = line.split("\t")
    if len(fields) < 4 or not fields[0]:
        raise ValueError(f"Malformed menu line: {line!r}")

    first, selector, host, port = fields[:4]
    try:
        port_number = int(port)
    except ValueError:
        raise ValueError(f"Invalid port in menu line: {line!r}") from None

    origin = FEED if selector in set(feed_caches) else DIRECT
    return Item(
        description=first[1:],
        selector=selector,
        host=host,
        port=port_number,
        kind=first[0],
        origin=origin,
    )


def split_record(line: str) -> Tuple[str, Optional[str], str]:
    """
    Split an update record into kind, date and the text after the date.

    An undated line yields a date of None and the rest of the line after
    the kind character.

    Args:
        line: Update log line

    Returns:
        Tuple of (kind, date or None, rest)
    """
    if not line:
        return "", None, ""

    kind, body = line[0], line[1:]
    date = parse_date(body[:DATE_LENGTH])
    if date and body[DATE_LENGTH:DATE_LENGTH + 1] == " ":
        return kind, date, body[DATE_LENGTH + 1:]
    return kind, None, body


def url_to_item(url: str, name: Optional[str] = None) -> Optional[Item]:
    """
    Convert a Gopher URL or bare host name into an item.

    Args:
        url: URL such as gopher://host:port/1selector, or a bare host
        name: Description for the item; defaults to the URL as given

    Returns:
        Item, or None if the URL is not a usable Gopher URL
    """
    text = url.strip()
    if not text:
        logger.warning("Empty URL")
        return None

    if "://" not in text:
        text = f"{DEFAULT_SCHEME}://{text}"

    try:
        parts = urlsplit(text)
        port = parts.port or DEFAULT_PORT
    except ValueError as e:
        logger.warning(f"Invalid URL '{url}': {e}")
        return None

    if parts.scheme not in SUPPORTED_SCHEMES:
        logger.warning(f"Unsupported scheme '{parts.scheme}' in URL '{url}'; only gopher URLs can be added")
        return None

    if not parts.hostname:
        logger.warning(f"URL '{url}' has no host")
        return None

    path = parts.path[1:] if parts.path.startswith("/") else parts.path
    if path:
        kind, selector = path[0], unquote(path[1:])
    else:
        kind, selector = DIRECTORY_KIND, ""
    if kind in NON_ITEM_KINDS:
        logger.warning(f"URL '{url}' has type '{kind}', which is not a subscribable item")
        return None
    if parts.query:
        selector = f"{selector}?{unquote(parts.query)}"

    return Item(
        description=name or url.strip(),
        selector=selector,
        host=parts.hostname,
        port=port,
        kind=kind,
    )


def item_to_url(item: Item) -> str:
    """Build a gopher URL for an item, omitting the default port."""
    port = "" if item.port == DEFAULT_PORT else f":{item.port}"
    return f"gopher://{item.host}{port}/{item.kind}{item.selector}"


def _clean_title(title: str) -> str:
    # tabs and newlines would break the menu line
    return " ".join(title.split())


def _first_link(entry) -> str:
    for link in entry.get("links", []):
        href = link.get("href")
        if href:
            return href
    return entry.get("link", "")


def feed_to_lines(content: Union[bytes, str], host: str, port: int) -> List[str]:
    """
    Convert an Atom or RSS feed into Gopher menu lines.

    Gopher links become regular items. Other links become HTML items using
    the URL: selector convention on the feed's own host and port.

    Args:
        content: Raw feed document
        host: Host the feed was fetched from
        port: Port the feed was fetched from

    Returns:
        One menu line per entry with a link; empty if the feed cannot be parsed
    """
    feed = feedparser.parse(content)

    if feed.bozo and not feed.entries:
        logger.warning(f"Cannot parse feed from {host}: {feed.get('bozo_exception')}")
        return []

    lines = []
    for entry in feed.entries:
        link = _first_link(entry).strip()
        if not link:
            logger.debug("Skipping feed entry without a link")
            continue
        title = _clean_title(entry.get("title", "")) or link

        if urlsplit(link).scheme in SUPPORTED_SCHEMES:
            item = url_to_item(link, title)
            if item is None:
                continue
        else:
            item = Item(description=title, selector=f"URL:{link}", host=host, port=port, kind=HTML_KIND)
        lines.append(encode(item))

    logger.info(f"Converted {len(lines)} feed entries from {host}")
    return lines
