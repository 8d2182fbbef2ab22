import unittest
import os
import sys
from datetime import datetime, timezone

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from chronologicon.errors import LineError
from chronologicon.services.line_parser import (
    decode_line,
    detect_delimiter,
    is_header_line,
    parse_line,
    split_fields,
)


class TestDelimiterDetection(unittest.TestCase):

    def test_picks_delimiter_with_most_fields(self):
        lines = ["a|b|c|d,e", "x|y|z|w"]
        self.assertEqual(detect_delimiter(lines), "|")

    def test_skips_comment_lines_when_sampling(self):
        lines = ["# comment; with; semicolons; everywhere", "a\tb\tc\td"]
        self.assertEqual(detect_delimiter(lines), "\t")

    def test_defaults_to_comma(self):
        self.assertEqual(detect_delimiter([]), ",")
        self.assertEqual(detect_delimiter(["no delimiters here"]), ",")


class TestHeaderDetection(unittest.TestCase):

    def test_recognises_header_tokens(self):
        self.assertTrue(is_header_line("eventId|eventName|startDate|endDate"))
        self.assertTrue(is_header_line("EVENT_NAME,description,start,end"))

    def test_data_line_is_not_header(self):
        self.assertFalse(is_header_line("Moon landing,Apollo 11,1969-07-20,1969-07-21"))


class TestDecoding(unittest.TestCase):

    def test_json_object_line(self):
        record = decode_line('{"eventName": "Treaty", "startDate": "1919-06-28", "endDate": "1919-06-29"}')
        self.assertEqual(record["eventName"], "Treaty")

    def test_rich_layout(self):
        line = "e-1|Battle|1066-10-14T09:00:00Z|1066-10-14T18:00:00Z|NULL|7|Hastings"
        record = decode_line(line, "|")
        self.assertEqual(record["eventId"], "e-1")
        self.assertIsNone(record["parentEventId"])
        self.assertEqual(record["metadata"], {"research_value": 7})
        self.assertEqual(record["description"], "Hastings")

    def test_rich_layout_non_numeric_research_value(self):
        line = "e-1|Battle|1066-10-14|1066-10-15|p-1|high|Hastings"
        record = decode_line(line, "|")
        self.assertEqual(record["metadata"], {"research_value": 0})
        self.assertEqual(record["parentEventId"], "p-1")

    def test_minimal_layout_with_metadata(self):
        line = 'Coronation,Crowned,1953-06-02,1953-06-03,p-9,"{""place"": ""London""}"'
        record = decode_line(line, ",")
        self.assertEqual(record["eventName"], "Coronation")
        self.assertEqual(record["parentEventId"], "p-9")
        self.assertEqual(record["metadata"], {"place": "London"})

    def test_minimal_layout_bad_metadata(self):
        with self.assertRaises(LineError) as ctx:
            decode_line("Name,Desc,2020-01-01,2020-01-02,,{not json}", ",")
        self.assertIn("Invalid metadata JSON", str(ctx.exception))

    def test_too_few_fields(self):
        with self.assertRaises(LineError) as ctx:
            decode_line("just,three,fields", ",")
        self.assertEqual(str(ctx.exception), "Invalid format. Expected at least 4 fields, got 3")

    def test_split_fields_strips_quotes_and_whitespace(self):
        self.assertEqual(split_fields(' "a" , b ,"c, d"', ","), ["a", "b", "c, d"])


class TestParseLine(unittest.TestCase):

    def test_duration_is_computed(self):
        event = parse_line('{"eventName": "Meeting", "startDate": "2020-01-01T00:00:00Z", '
                           '"endDate": "2020-01-01T01:30:00Z"}')
        self.assertEqual(event.duration_minutes, 90)
        self.assertEqual(event.start_date, datetime(2020, 1, 1, tzinfo=timezone.utc))

    def test_duration_rounds_up(self):
        event = parse_line('{"eventName": "Short", "startDate": "2020-01-01T00:00:00Z", '
                           '"endDate": "2020-01-01T00:00:01Z"}')
        self.assertEqual(event.duration_minutes, 1)

    def test_duration_in_input_is_ignored(self):
        event = parse_line('{"eventName": "X", "startDate": "2020-01-01T00:00:00Z", '
                           '"endDate": "2020-01-01T00:10:00Z", "durationMinutes": 999}')
        self.assertEqual(event.duration_minutes, 10)

    def test_offsets_are_normalised_to_utc(self):
        event = parse_line('{"eventName": "X", "startDate": "2020-01-01T02:00:00+02:00", '
                           '"endDate": "2020-01-01T03:00:00+02:00"}')
        self.assertEqual(event.start_date, datetime(2020, 1, 1, 0, 0, tzinfo=timezone.utc))

    def test_parent_id_alias_and_generated_id(self):
        event = parse_line('{"eventName": "Child", "startDate": "2020-01-01", '
                           '"endDate": "2020-01-02", "parentId": "root"}')
        self.assertEqual(event.parent_event_id, "root")
        self.assertTrue(event.event_id)

    def test_keeps_given_event_id(self):
        event = parse_line("abc|Named|2020-01-01|2020-01-02||3|desc", "|")
        self.assertEqual(event.event_id, "abc")

    def test_missing_name(self):
        with self.assertRaises(LineError) as ctx:
            parse_line('{"eventName": "  ", "startDate": "2020-01-01", "endDate": "2020-01-02"}')
        self.assertEqual(str(ctx.exception), "Event name is required and must be a string")

    def test_missing_dates(self):
        with self.assertRaises(LineError) as ctx:
            parse_line('{"eventName": "X", "startDate": "2020-01-01"}')
        self.assertEqual(str(ctx.exception), "Start date and end date are required")

    def test_unparseable_dates(self):
        with self.assertRaises(LineError) as ctx:
            parse_line('{"eventName": "X", "startDate": "yesterday", "endDate": "today"}')
        self.assertEqual(str(ctx.exception), "Invalid date format. Use ISO 8601 format.")

    def test_offset_pushing_date_out_of_range(self):
        with self.assertRaises(LineError) as ctx:
            parse_line("B,d,0001-01-01T00:00:00+01:00,2020-01-02", ",")
        self.assertEqual(str(ctx.exception), "Invalid date format. Use ISO 8601 format.")

    def test_start_must_precede_end(self):
        with self.assertRaises(LineError) as ctx:
            parse_line('{"eventName": "X", "startDate": "2020-01-02", "endDate": "2020-01-02"}')
        self.assertEqual(str(ctx.exception), "Start date must be before end date")

    def test_line_error_renders_line_number(self):
        self.assertEqual(str(LineError("Bad", line_number=4)), "Line 4: Bad")


if __name__ == '__main__':
    unittest.main()
