"""
Unit tests for update log merging.
"""

import unittest
from unittest.mock import patch
import os
import sys

# Add project root to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from moku_pona.line_codec import split_record
from moku_pona.update_log import is_legacy, make_record, migrate_legacy, prune, record_update


CLUB = "1Gopher Club\tphlogs\tgopher.club\t70"
NOTES = "0Notes\tnotes.txt\texample.org\t7070"
ALEX = "1Alex\t/users/alex\tsdf.org\t70"
HEADER = "iRecent updates\t\tlocalhost\t70"


class TestRecordUpdate(unittest.TestCase):

    def test_empty_log(self):
        self.assertEqual(record_update([], CLUB, "2024-01-15"), ["12024-01-15 Gopher Club\tphlogs\tgopher.club\t70"])

    def test_make_record(self):
        self.assertEqual(make_record(NOTES, "2024-01-15"), "02024-01-15 Notes\tnotes.txt\texample.org\t7070")

    def test_uses_utc_today_by_default(self):
        with patch('moku_pona.update_log.today_utc', return_value="2030-06-01"):
            log = record_update([], CLUB)
        self.assertEqual(log, [make_record(CLUB, "2030-06-01")])

    def test_inserts_after_header_lines(self):
        log = [HEADER, "i\t\tlocalhost\t70", make_record(ALEX, "2024-01-10")]

        result = record_update(log, CLUB, "2024-01-15")

        self.assertEqual(result, [
            HEADER,
            "i\t\tlocalhost\t70",
            make_record(CLUB, "2024-01-15"),
            make_record(ALEX, "2024-01-10"),
        ])

    def test_moves_item_to_top(self):
        log = [HEADER, make_record(ALEX, "2024-01-10"), make_record(CLUB, "2024-01-01")]

        result = record_update(log, CLUB, "2024-01-15")

        self.assertEqual(result, [HEADER, make_record(CLUB, "2024-01-15"), make_record(ALEX, "2024-01-10")])

    def test_idempotent(self):
        once = record_update([HEADER, make_record(ALEX, "2024-01-10")], CLUB, "2024-01-15")
        twice = record_update(once, CLUB, "2024-01-15")
        self.assertEqual(once, twice)

    def test_removes_all_stale_records(self):
        log = [make_record(CLUB, "2024-01-03"), make_record(ALEX, "2024-01-02"), make_record(CLUB, "2024-01-01")]

        result = record_update(log, CLUB, "2024-01-15")

        self.assertEqual(result, [make_record(CLUB, "2024-01-15"), make_record(ALEX, "2024-01-02")])

    def test_same_description_different_kind_is_kept(self):
        other_kind = "0Gopher Club\tphlogs\tgopher.club\t70"
        log = [make_record(other_kind, "2024-01-01")]

        result = record_update(log, CLUB, "2024-01-15")

        self.assertEqual(len(result), 2)

    def test_uniqueness_and_ordering_over_many_updates(self):
        log = [HEADER]
        sequence = [CLUB, NOTES, ALEX, CLUB, NOTES, CLUB]
        for day, line in enumerate(sequence, start=1):
            log = record_update(log, line, f"2024-02-{day:02d}")

        self.assertEqual(log[0], HEADER)
        records = [split_record(line) for line in log[1:]]
        keys = [(kind, rest) for kind, _, rest in records]
        self.assertEqual(len(keys), len(set(keys)))
        self.assertEqual(log[1], make_record(CLUB, "2024-02-06"))
        self.assertEqual(log[2], make_record(NOTES, "2024-02-05"))
        self.assertEqual(log[3], make_record(ALEX, "2024-02-03"))

    def test_rejects_empty_line(self):
        with self.assertRaises(ValueError):
            record_update([], "", "2024-01-15")


class TestLegacyMigration(unittest.TestCase):

    def setUp(self):
        self.legacy = [
            "iUpdates\t\tlocalhost\t70",
            "i2024-01-02\t\tlocalhost\t70",
            CLUB,
            ALEX,
            "i2024-01-01\t\tlocalhost\t70",
            "1Older\told\texample.org\t70",
            NOTES,
        ]

    def test_detects_legacy_layout(self):
        self.assertTrue(is_legacy(self.legacy))

    def test_dated_records_are_not_legacy(self):
        log = ["i2024-01-02\t\tlocalhost\t70", make_record(CLUB, "2024-01-02")]
        self.assertFalse(is_legacy(log))

    def test_migrates_legacy_layout(self):
        self.assertEqual(migrate_legacy(self.legacy), [
            make_record(CLUB, "2024-01-02"),
            make_record(ALEX, "2024-01-02"),
            make_record("1Older\told\texample.org\t70", "2024-01-01"),
        ])

    def test_migration_is_idempotent(self):
        migrated = migrate_legacy(self.legacy)
        self.assertEqual(migrate_legacy(migrated), migrated)

    def test_record_update_migrates_first(self):
        result = record_update(self.legacy, CLUB, "2024-01-15")

        self.assertEqual(result, [
            make_record(CLUB, "2024-01-15"),
            make_record(ALEX, "2024-01-02"),
            make_record("1Older\told\texample.org\t70", "2024-01-01"),
        ])


class TestPrune(unittest.TestCase):

    def test_prune_keeps_headers_and_subscribed(self):
        log = [HEADER, make_record(CLUB, "2024-01-15"), make_record(ALEX, "2024-01-10")]

        kept, removed = prune(log, lambda line: line == CLUB)

        self.assertEqual(kept, [HEADER, make_record(CLUB, "2024-01-15")])
        self.assertEqual(removed, [make_record(ALEX, "2024-01-10")])


if __name__ == '__main__':
    unittest.main()
