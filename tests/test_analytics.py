import unittest
from unittest.mock import MagicMock
import os
import sys
from datetime import datetime, timezone

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from chronologicon.errors import NotFoundError, ValidationError
from chronologicon.services.analytics import (
    find_gaps,
    find_influence_path,
    find_overlaps,
    overlapping_pairs,
    parse_window,
    temporal_gaps,
)

from fakes import InMemoryEventStore, make_event


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


class TestParseWindow(unittest.TestCase):

    def test_valid_window(self):
        start, end = parse_window("2020-01-01T00:00:00Z", "2020-01-02T00:00:00Z")
        self.assertEqual(start, utc(2020, 1, 1))
        self.assertEqual(end, utc(2020, 1, 2))

    def test_missing_bound(self):
        with self.assertRaises(ValidationError):
            parse_window("2020-01-01", None)

    def test_unparseable_bound(self):
        with self.assertRaises(ValidationError):
            parse_window("not a date", "2020-01-02")

    def test_bound_out_of_range_after_offset(self):
        with self.assertRaises(ValidationError):
            parse_window("0001-01-01T00:00:00+01:00", "2020-01-01")
        with self.assertRaises(ValidationError):
            find_overlaps(InMemoryEventStore(), "2020-01-01", "9999-12-31T23:59:59-01:00")

    def test_bounds_must_increase(self):
        with self.assertRaises(ValidationError):
            parse_window("2020-01-02", "2020-01-02")


class TestOverlaps(unittest.TestCase):

    def test_intersection_is_reported(self):
        events = [
            make_event("A", "2020-01-01T10:00:00Z", "2020-01-01T12:00:00Z"),
            make_event("B", "2020-01-01T11:00:00Z", "2020-01-01T13:00:00Z"),
        ]

        groups = overlapping_pairs(events)

        self.assertEqual(len(groups), 1)
        group = groups[0]
        self.assertEqual([event.event_id for event in group.events], ["A", "B"])
        self.assertEqual(group.overlap_start, utc(2020, 1, 1, 11))
        self.assertEqual(group.overlap_end, utc(2020, 1, 1, 12))
        self.assertEqual(group.overlap_duration_minutes, 60)

    def test_disjoint_events_do_not_overlap(self):
        events = [
            make_event("A", "2020-01-01T10:00:00Z", "2020-01-01T11:00:00Z"),
            make_event("B", "2020-01-01T12:00:00Z", "2020-01-01T13:00:00Z"),
        ]
        self.assertEqual(overlapping_pairs(events), [])

    def test_each_pair_reported_once(self):
        events = [
            make_event("A", "2020-01-01T00:00:00Z", "2020-01-01T10:00:00Z"),
            make_event("B", "2020-01-01T01:00:00Z", "2020-01-01T09:00:00Z"),
            make_event("C", "2020-01-01T02:00:00Z", "2020-01-01T03:00:00Z"),
        ]
        pairs = [tuple(e.event_id for e in group.events) for group in overlapping_pairs(events)]
        self.assertEqual(pairs, [("A", "B"), ("A", "C"), ("B", "C")])

    def test_find_overlaps_only_uses_events_inside_window(self):
        store = InMemoryEventStore([
            make_event("A", "2020-01-01T10:00:00Z", "2020-01-01T12:00:00Z"),
            make_event("B", "2020-01-01T11:00:00Z", "2020-01-01T13:00:00Z"),
            make_event("C", "2020-01-01T11:30:00Z", "2020-01-03T00:00:00Z"),
        ])

        groups = find_overlaps(store, "2020-01-01T00:00:00Z", "2020-01-02T00:00:00Z")

        self.assertEqual(len(groups), 1)
        self.assertEqual(groups[0].to_dict()["overlap_start"], "2020-01-01T11:00:00.000Z")


class TestGaps(unittest.TestCase):

    def test_gap_between_consecutive_events(self):
        events = [
            make_event("A", "2020-01-01T10:00:00Z", "2020-01-01T11:00:00Z"),
            make_event("B", "2020-01-01T11:30:00Z", "2020-01-01T12:00:00Z"),
        ]

        gaps = temporal_gaps(events)

        self.assertEqual(len(gaps), 1)
        self.assertEqual(gaps[0].gap_duration_minutes, 30)
        self.assertEqual(gaps[0].preceding_event.event_id, "A")
        self.assertEqual(gaps[0].following_event.event_id, "B")

    def test_largest_gap_first(self):
        store = InMemoryEventStore([
            make_event("A", "2020-01-01T00:00:00Z", "2020-01-01T01:00:00Z"),
            make_event("B", "2020-01-01T01:10:00Z", "2020-01-01T02:00:00Z"),
            make_event("C", "2020-01-01T05:00:00Z", "2020-01-01T06:00:00Z"),
        ])

        report = find_gaps(store, "2020-01-01T00:00:00Z", "2020-01-02T00:00:00Z")

        self.assertEqual(report.largest_gap.gap_duration_minutes, 180)
        self.assertEqual([gap.gap_duration_minutes for gap in report.all_gaps], [180, 10])

    def test_no_gaps(self):
        store = InMemoryEventStore([
            make_event("A", "2020-01-01T00:00:00Z", "2020-01-01T02:00:00Z"),
            make_event("B", "2020-01-01T01:00:00Z", "2020-01-01T03:00:00Z"),
        ])

        report = find_gaps(store, "2020-01-01T00:00:00Z", "2020-01-02T00:00:00Z")

        self.assertIsNone(report.largest_gap)
        self.assertEqual(report.to_dict(), {"largest_gap": None, "all_gaps": []})

    def test_invalid_window(self):
        with self.assertRaises(ValidationError):
            find_gaps(InMemoryEventStore(), "2020-01-02", "2020-01-01")


class TestInfluencePath(unittest.TestCase):

    def setUp(self):
        self.store = InMemoryEventStore([
            make_event("A", "2020-01-01T00:00:00Z", "2020-01-01T01:00:00Z"),
            make_event("B", "2020-01-01T02:00:00Z", "2020-01-01T02:30:00Z", parent_event_id="A"),
            make_event("C", "2020-01-01T03:00:00Z", "2020-01-01T03:10:00Z", parent_event_id="B"),
            make_event("D", "2020-01-01T04:00:00Z", "2020-01-01T05:00:00Z", parent_event_id="A"),
            make_event("island", "2020-01-01T00:00:00Z", "2020-01-01T01:00:00Z"),
        ])

    def test_downward_path(self):
        result = find_influence_path(self.store, "A", "C")

        self.assertEqual([event.event_id for event in result.path], ["A", "B", "C"])
        self.assertEqual(result.hop_count, 2)
        self.assertEqual(result.total_duration_minutes, 60 + 30 + 10)

    def test_path_through_shared_parent(self):
        result = find_influence_path(self.store, "C", "D")
        self.assertEqual([event.event_id for event in result.path], ["C", "B", "A", "D"])
        self.assertEqual(result.to_dict()["hop_count"], 3)

    def test_same_source_and_target(self):
        with self.assertRaises(ValidationError):
            find_influence_path(self.store, "A", "A")

    def test_missing_ids(self):
        with self.assertRaises(ValidationError):
            find_influence_path(self.store, "A", "")

    def test_unknown_source(self):
        with self.assertRaises(NotFoundError) as ctx:
            find_influence_path(self.store, "nope", "A")
        self.assertEqual(str(ctx.exception), "Source event not found")

    def test_unreachable_target(self):
        with self.assertRaises(NotFoundError) as ctx:
            find_influence_path(self.store, "A", "island")
        self.assertEqual(str(ctx.exception), "No influence path found between the specified events")

    def test_hop_bound(self):
        with self.assertRaises(NotFoundError):
            find_influence_path(self.store, "A", "C", max_hops=1)
        self.assertEqual(find_influence_path(self.store, "A", "C", max_hops=2).hop_count, 2)

    def test_cyclic_parent_links_terminate(self):
        store = InMemoryEventStore([
            make_event("x", "2020-01-01", "2020-01-02", parent_event_id="y"),
            make_event("y", "2020-01-02", "2020-01-03", parent_event_id="x"),
            make_event("z", "2020-01-03", "2020-01-04"),
        ])
        with self.assertRaises(NotFoundError):
            find_influence_path(store, "x", "z")

    def test_one_store_round_trip_per_level(self):
        store = MagicMock(wraps=self.store)
        find_influence_path(store, "A", "C")
        self.assertEqual(store.find_children.call_count, 2)


if __name__ == '__main__':
    unittest.main()
