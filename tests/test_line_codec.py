"""
Unit tests for the line codec module.
"""

import unittest
import os
import sys

# Add project root to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from moku_pona.line_codec import (
    FEED, DIRECT, Item, decode, encode, feed_to_lines, item_to_url, split_record, url_to_item
)


ATOM_FEED = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Example Phlog</title>
  <id>urn:example:phlog</id>
  <updated>2024-01-02T00:00:00Z</updated>
  <entry>
    <title>First post</title>
    <link href="gopher://example.org/0post"/>
    <id>urn:example:1</id>
    <updated>2024-01-02T00:00:00Z</updated>
  </entry>
  <entry>
    <title>Web	post</title>
    <link href="https://example.org/web"/>
    <id>urn:example:2</id>
    <updated>2024-01-01T00:00:00Z</updated>
  </entry>
</feed>
"""

RSS_FEED = """<?xml version="1.0"?>
<rss version="2.0">
  <channel>
    <title>Example</title>
    <link>https://example.org/</link>
    <description>Example feed</description>
    <item>
      <title>Hello</title>
      <link>https://example.org/hello</link>
    </item>
    <item>
      <title>No link here</title>
    </item>
  </channel>
</rss>
"""


class TestItemLines(unittest.TestCase):

    def setUp(self):
        self.item = Item(description="Gopher Club", selector="phlogs", host="gopher.club", port=70, kind="1")

    def test_encode(self):
        self.assertEqual(encode(self.item), "1Gopher Club\tphlogs\tgopher.club\t70")

    def test_decode_round_trip(self):
        items = [
            self.item,
            Item(description="", selector="", host="localhost", port=7070, kind="0"),
            Item(description="A/B", selector="/x/y z", host="example.org", port=70, kind="h"),
        ]
        for item in items:
            self.assertEqual(decode(encode(item)), item)

    def test_decode_feed_origin(self):
        line = "1Feed\texample.org-70-feed.txt\texample.org\t70"
        self.assertEqual(decode(line, ["example.org-70-feed.txt"]).origin, FEED)
        self.assertEqual(decode(line).origin, DIRECT)

    def test_decode_ignores_extra_fields(self):
        item = decode("1Plus\tsel\thost\t70\t+")
        self.assertEqual(item.selector, "sel")

    def test_decode_malformed(self):
        for line in ["", "1only\tthree\tfields", "1bad\tport\thost\tseventy"]:
            with self.assertRaises(ValueError):
                decode(line)

    def test_as_feed(self):
        feed_item = self.item.as_feed("gopher.club-70-phlogs.txt")
        self.assertTrue(feed_item.is_feed)
        self.assertEqual(feed_item.selector, "gopher.club-70-phlogs.txt")
        self.assertEqual(feed_item.description, "Gopher Club")


class TestSplitRecord(unittest.TestCase):

    def test_dated_record(self):
        self.assertEqual(
            split_record("12024-01-15 Gopher Club\tphlogs\tgopher.club\t70"),
            ("1", "2024-01-15", "Gopher Club\tphlogs\tgopher.club\t70"),
        )

    def test_undated_line(self):
        self.assertEqual(
            split_record("1Gopher Club\tphlogs\tgopher.club\t70"),
            ("1", None, "Gopher Club\tphlogs\tgopher.club\t70"),
        )

    def test_invalid_date_is_not_a_date(self):
        kind, date, rest = split_record("12024-13-45 Strange\tx\ty\t70")
        self.assertIsNone(date)
        self.assertEqual(rest, "2024-13-45 Strange\tx\ty\t70")

    def test_date_without_space(self):
        self.assertIsNone(split_record("12024-01-15Title\tx\ty\t70")[1])

    def test_empty(self):
        self.assertEqual(split_record(""), ("", None, ""))


class TestUrlToItem(unittest.TestCase):

    def test_full_url_with_name(self):
        item = url_to_item("gopher://gopher.club/1phlogs", "Gopher Club")
        self.assertEqual(encode(item), "1Gopher Club\tphlogs\tgopher.club\t70")

    def test_bare_host(self):
        item = url_to_item("gopher.club")
        self.assertEqual(item.kind, "1")
        self.assertEqual(item.selector, "")
        self.assertEqual(item.host, "gopher.club")
        self.assertEqual(item.port, 70)
        self.assertEqual(item.description, "gopher.club")

    def test_port_and_kind(self):
        item = url_to_item("gopher://example.org:7070/0/users/alex/file.txt")
        self.assertEqual(item.port, 7070)
        self.assertEqual(item.kind, "0")
        self.assertEqual(item.selector, "/users/alex/file.txt")

    def test_root_path(self):
        item = url_to_item("gopher://example.org/")
        self.assertEqual((item.kind, item.selector), ("1", ""))

    def test_tls_variant_accepted(self):
        self.assertIsNotNone(url_to_item("gophers://example.org/1"))

    def test_percent_encoding(self):
        item = url_to_item("gopher://example.org/1my%20phlog")
        self.assertEqual(item.selector, "my phlog")

    def test_other_schemes_rejected(self):
        with self.assertLogs('moku_pona.line_codec', level='WARNING'):
            self.assertIsNone(url_to_item("https://example.org/"))

    def test_bad_port_rejected(self):
        with self.assertLogs('moku_pona.line_codec', level='WARNING'):
            self.assertIsNone(url_to_item("gopher://example.org:port/1"))

    def test_info_and_error_kinds_rejected(self):
        for url in ("gopher://example.org/ifoo", "gopher://example.org/3error"):
            with self.assertLogs('moku_pona.line_codec', level='WARNING'):
                self.assertIsNone(url_to_item(url, "Info"))

    def test_missing_host_rejected(self):
        self.assertIsNone(url_to_item("gopher:///1phlogs"))
        self.assertIsNone(url_to_item("   "))

    def test_item_to_url(self):
        self.assertEqual(item_to_url(url_to_item("gopher://gopher.club/1phlogs")), "gopher://gopher.club/1phlogs")
        self.assertEqual(item_to_url(url_to_item("example.org:7070")), "gopher://example.org:7070/1")


class TestFeedToLines(unittest.TestCase):

    def test_atom_feed(self):
        lines = feed_to_lines(ATOM_FEED.encode("utf-8"), "example.org", 70)
        self.assertEqual(lines, [
            "0First post\tpost\texample.org\t70",
            "hWeb post\tURL:https://example.org/web\texample.org\t70",
        ])

    def test_rss_feed_skips_entries_without_link(self):
        lines = feed_to_lines(RSS_FEED, "feeds.example.org", 7070)
        self.assertEqual(lines, ["hHello\tURL:https://example.org/hello\tfeeds.example.org\t7070"])

    def test_not_a_feed(self):
        self.assertEqual(feed_to_lines(b"this is not a feed at all", "example.org", 70), [])


if __name__ == '__main__':
    unittest.main()
