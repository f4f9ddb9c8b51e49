from __future__ import annotations

import datetime as dt
import unittest
from types import SimpleNamespace

from acadcal.util.dates import (
    civil_date,
    day_contains_event,
    days_between,
    days_in_month,
    event_intersects_range,
    first_weekday_sun0,
    is_same_civil_date,
    long_date_label,
    parse_civil_datetime,
    parse_year_month,
    shift_month,
    week_start,
)
from acadcal.util.timeparse import (
    InvalidTimeFormat,
    format_hour_label,
    format_time_12h,
    format_time_range,
    minutes_to_hhmm,
    parse_hhmm,
    time_to_minutes,
    try_time_to_minutes,
)


def _ev(start, end):
    return SimpleNamespace(start_date=parse_civil_datetime(start), end_date=parse_civil_datetime(end))


class TestCivilDatesContract(unittest.TestCase):
    def test_parse_drops_offset_and_keeps_fields(self):
        self.assertEqual(parse_civil_datetime("2024-02-29T23:30:00Z"), dt.datetime(2024, 2, 29, 23, 30))
        self.assertEqual(parse_civil_datetime("2024-02-29T23:30:00+05:30"), dt.datetime(2024, 2, 29, 23, 30))
        self.assertEqual(parse_civil_datetime("2024-02-29"), dt.datetime(2024, 2, 29))
        self.assertEqual(parse_civil_datetime("2024-01-01T08:00:00.123Z"), dt.datetime(2024, 1, 1, 8, 0, 0, 123000))

    def test_parse_rejects_garbage(self):
        self.assertIsNone(parse_civil_datetime("yesterday"))
        self.assertIsNone(parse_civil_datetime("2023-02-29"))
        self.assertIsNone(parse_civil_datetime(None))
        self.assertIsNone(parse_civil_datetime(12345))

    def test_civil_date_requires_date(self):
        self.assertEqual(civil_date(dt.datetime(2024, 3, 1, 10)), dt.date(2024, 3, 1))
        with self.assertRaises(TypeError):
            civil_date("2024-03-01")

    def test_same_date_and_days_between(self):
        self.assertTrue(is_same_civil_date(dt.datetime(2024, 3, 1, 0, 1), dt.datetime(2024, 3, 1, 23, 59)))
        self.assertFalse(is_same_civil_date(dt.date(2024, 3, 1), dt.date(2024, 3, 2)))
        self.assertEqual(days_between(dt.date(2024, 2, 28), dt.date(2024, 3, 1)), 2)
        self.assertEqual(days_between(dt.date(2024, 3, 1), dt.date(2024, 2, 28)), -2)

    def test_day_contains_event_is_inclusive_of_both_ends(self):
        ev = _ev("2024-02-19T15:00:00Z", "2024-02-21T08:00:00Z")
        self.assertFalse(day_contains_event(dt.date(2024, 2, 18), ev))
        self.assertTrue(day_contains_event(dt.date(2024, 2, 19), ev))
        self.assertTrue(day_contains_event(dt.date(2024, 2, 20), ev))
        self.assertTrue(day_contains_event(dt.date(2024, 2, 21), ev))
        self.assertFalse(day_contains_event(dt.date(2024, 2, 22), ev))

    def test_intersects_range(self):
        ev = _ev("2024-01-30", "2024-02-02")
        self.assertTrue(event_intersects_range(ev, dt.date(2024, 2, 1), dt.date(2024, 2, 29)))
        self.assertFalse(event_intersects_range(ev, dt.date(2024, 2, 3), dt.date(2024, 2, 29)))

    def test_month_arithmetic(self):
        self.assertEqual(days_in_month(2024, 2), 29)
        self.assertEqual(days_in_month(2023, 2), 28)
        self.assertEqual(first_weekday_sun0(2024, 2), 4)  # Thursday
        self.assertEqual(shift_month(dt.date(2024, 1, 31), 1), dt.date(2024, 2, 29))
        self.assertEqual(shift_month(dt.date(2024, 1, 15), -1), dt.date(2023, 12, 15))
        self.assertEqual(week_start(dt.date(2024, 2, 28)), dt.date(2024, 2, 25))
        self.assertEqual(week_start(dt.date(2024, 2, 25)), dt.date(2024, 2, 25))

    def test_parse_year_month(self):
        self.assertEqual(parse_year_month("2024-02"), (2024, 2))
        for bad in ("2024", "2024-13", "x-y"):
            with self.assertRaises(ValueError):
                parse_year_month(bad)

    def test_long_label_is_locale_independent(self):
        self.assertEqual(long_date_label(dt.date(2024, 2, 28)), "Wednesday, February 28, 2024")


class TestTimeParseContract(unittest.TestCase):
    def test_parse_hhmm(self):
        self.assertEqual(parse_hhmm("09:05"), (9, 5))
        self.assertEqual(parse_hhmm("9:05"), (9, 5))
        self.assertEqual(parse_hhmm("24:00"), (24, 0))
        for bad in ("24:01", "25:00", "9:5", "12:60", "", "noon"):
            with self.assertRaises(InvalidTimeFormat):
                parse_hhmm(bad)
        with self.assertRaises(InvalidTimeFormat):
            parse_hhmm(None)  # type: ignore[arg-type]

    def test_minutes_roundtrip_helpers(self):
        self.assertEqual(time_to_minutes("10:30"), 630)
        self.assertEqual(minutes_to_hhmm(630), "10:30")
        self.assertIsNone(try_time_to_minutes("xx"))
        self.assertIsNone(try_time_to_minutes(None))

    def test_twelve_hour_labels(self):
        self.assertEqual(format_hour_label(9), "9 AM")
        self.assertEqual(format_hour_label(12), "12 PM")
        self.assertEqual(format_hour_label(0), "12 AM")
        self.assertEqual(format_time_12h("13:05"), "1:05 PM")
        self.assertEqual(format_time_12h("00:30"), "12:30 AM")

    def test_time_range_label(self):
        self.assertEqual(format_time_range("09:00", "10:30"), ("9:00 AM - 10:30 AM", "90 min"))
        self.assertIsNone(format_time_range("09:00", None))
        self.assertEqual(format_time_range("10:00", "10:00"), ("10:00 AM - 10:00 AM", None))


if __name__ == "__main__":
    unittest.main(verbosity=2)
