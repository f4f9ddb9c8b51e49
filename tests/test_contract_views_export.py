from __future__ import annotations

import datetime as dt
import json
import unittest
from pathlib import Path

from acadcal.clock import FixedClock, SteppedClock
from acadcal.config import LayoutConfig
from acadcal.export import calendar_view_to_dict, layout_to_dict, schedule_view_to_dict
from acadcal.filters import ItemFilter
from acadcal.model import Event, ScheduleItem
from acadcal.views import build_calendar_view, build_schedule_view, refresh_schedule_layout, visible_event_count


REPO_ROOT = Path(__file__).resolve().parent.parent
EVENTS = REPO_ROOT / "tests" / "fixtures" / "events_sample.json"
SCHEDULE = REPO_ROOT / "tests" / "fixtures" / "schedule_sample.json"

MONDAY_0915 = dt.datetime(2024, 2, 12, 9, 15)


def _events() -> list:
    return json.loads(EVENTS.read_text(encoding="utf-8"))["events"]


def _schedule() -> dict:
    return json.loads(SCHEDULE.read_text(encoding="utf-8"))["data"]


class TestCalendarViewContract(unittest.TestCase):
    def test_month_view(self):
        cv = build_calendar_view(_events(), view="month", anchor=dt.date(2024, 2, 14), today=dt.date(2024, 2, 14))
        self.assertEqual(cv.title, "February 2024")
        self.assertEqual(len(cv.cells), 42)
        self.assertEqual(len(cv.warnings), 3)
        self.assertEqual(visible_event_count(cv), 5)
        self.assertEqual(len(cv.view_key), 8)

    def test_filter_applies_before_layout(self):
        cv = build_calendar_view(
            _events(),
            view="month",
            anchor=dt.date(2024, 2, 1),
            item_filter=ItemFilter(event_type="exam"),
            today=dt.date(2024, 2, 1),
        )
        shown = {e.id for c in cv.cells for e in c.events}
        self.assertEqual(shown, {"ev1"})
        self.assertEqual([e.id for e in cv.events], ["ev1"])

    def test_view_key_tracks_filters(self):
        a = build_calendar_view(_events(), view="list", anchor=dt.date(2024, 2, 1), today=dt.date(2024, 2, 1))
        b = build_calendar_view(
            _events(), view="list", anchor=dt.date(2024, 2, 1), item_filter=ItemFilter(search_text="fair"), today=dt.date(2024, 2, 1)
        )
        self.assertNotEqual(a.view_key, b.view_key)
        self.assertEqual([g.key for g in b.groups], ["2024-02-29"])

    def test_week_and_list_views(self):
        week = build_calendar_view(_events(), view="week", anchor=dt.date(2024, 2, 28), today=dt.date(2024, 2, 28))
        self.assertEqual(week.title, "25 February - 2 March 2024")
        self.assertEqual(list(week.columns)[0], "Sunday")

        lst = build_calendar_view(_events(), view="list", anchor=dt.date(2024, 2, 1), today=dt.date(2024, 2, 1))
        self.assertEqual(
            [g.key for g in lst.groups],
            ["2024-01-30", "2024-02-14", "2024-02-19", "2024-02-29"],
        )
        self.assertEqual([e.id for e in lst.groups[1].events], ["ev1", "ev8"])

    def test_list_view_keeps_to_the_anchor_month(self):
        march = build_calendar_view(_events(), view="list", anchor=dt.date(2024, 3, 10), today=dt.date(2024, 3, 10))
        self.assertEqual(march.title, "March 2024")
        self.assertEqual([g.key for g in march.groups], ["2024-03-02"])
        self.assertEqual(visible_event_count(march), 1)

    def test_built_events_are_still_range_checked(self):
        bad = Event(
            id="bad", title="Backwards", start_date=dt.datetime(2024, 2, 10), end_date=dt.datetime(2024, 2, 5)
        )
        good = Event(id="good", title="Fine", start_date=dt.datetime(2024, 2, 12), end_date=dt.datetime(2024, 2, 12))
        for view in ("month", "list"):
            with self.subTest(view=view):
                cv = build_calendar_view([bad, good], view=view, anchor=dt.date(2024, 2, 1), today=dt.date(2024, 2, 1))
                self.assertEqual([e.id for e in cv.events], ["good"])
                self.assertEqual([(w.record_id, w.kind, w.index) for w in cv.warnings], [("bad", "invalid_range", 0)])
                self.assertEqual(visible_event_count(cv), 1)

    def test_mixed_built_and_raw_events(self):
        built = Event(id="built", title="Built", start_date=dt.datetime(2024, 2, 12), end_date=dt.datetime(2024, 2, 12))
        raw = {"_id": "raw", "title": "Raw", "startDate": "2024-02-13", "eventType": "exam"}
        cv = build_calendar_view([built, raw], view="list", anchor=dt.date(2024, 2, 1), today=dt.date(2024, 2, 1))
        self.assertEqual([e.id for e in cv.events], ["built", "raw"])
        self.assertEqual(cv.warnings, ())

    def test_bad_view(self):
        with self.assertRaises(ValueError):
            build_calendar_view([], view="year", anchor=dt.date(2024, 2, 1))
        with self.assertRaises(TypeError):
            build_calendar_view([], view="month", anchor="2024-02-01")  # type: ignore[arg-type]


class TestScheduleViewContract(unittest.TestCase):
    def test_defaults_to_todays_weekday(self):
        sv = build_schedule_view(_schedule(), clock=FixedClock(MONDAY_0915))
        self.assertEqual(sv.day, "Monday")
        self.assertEqual(sv.layout.mode, "list")
        self.assertEqual([e.item.id for e in sv.layout.entries], ["s3", "s1", "s2"])
        self.assertEqual([(e.is_now, e.is_past) for e in sv.layout.entries], [(False, True), (True, False), (False, False)])
        self.assertEqual((sv.layout.window.start_hour, sv.layout.window.end_hour), (7, 13))
        self.assertEqual(sv.total, 4)
        self.assertEqual({w.record_id for w in sv.warnings}, {"s5", "s6"})

    def test_filtered_totals_but_unfiltered_stats(self):
        sv = build_schedule_view(
            _schedule(), day="Monday", item_filter=ItemFilter(subject_id="SUB1"), clock=FixedClock(MONDAY_0915)
        )
        self.assertEqual(sv.total, 2)
        self.assertEqual(sv.stats.total, 4)
        self.assertEqual([r.id for r in sv.options.subjects], ["SUB1", "SUB2", "SUB3"])
        self.assertEqual(sv.grouped["Wednesday"], ())

    def test_compact_jumps_to_first_busy_day(self):
        sv = build_schedule_view(_schedule(), day="Sunday", compact=True, clock=FixedClock(MONDAY_0915))
        self.assertEqual(sv.day, "Monday")

    def test_grid_and_refresh(self):
        sv = build_schedule_view(_schedule(), day="Wednesday", show_grid=True, clock=FixedClock(MONDAY_0915))
        self.assertEqual(sv.layout.mode, "grid")
        self.assertEqual(len(sv.layout.items), 1)
        later = refresh_schedule_layout(sv, SteppedClock(dt.datetime(2024, 2, 14, 13, 30)))
        self.assertEqual(later.mode, "grid")
        self.assertTrue(later.items[0].is_now)

    def test_refresh_reuses_the_build_config(self):
        cfg = LayoutConfig(min_height_percent=20, window_padding_hours=0)
        items = [ScheduleItem(id="short", day_of_week="Monday", start_time="09:00", end_time="09:02")]
        sv = build_schedule_view(items, day="Monday", show_grid=True, clock=FixedClock(dt.datetime(2024, 2, 12, 9, 2)), config=cfg)
        self.assertIs(sv.config, cfg)
        self.assertEqual((sv.layout.window.start_hour, sv.layout.window.end_hour), (9, 10))
        self.assertEqual(sv.layout.items[0].height_percent, 20.0)

        later = refresh_schedule_layout(sv, FixedClock(dt.datetime(2024, 2, 12, 9, 30)))
        self.assertEqual((later.window.start_hour, later.window.end_hour), (9, 10))
        self.assertEqual(later.items[0].height_percent, 20.0)
        self.assertEqual(later.current_minutes, 570)

        override = refresh_schedule_layout(sv, FixedClock(dt.datetime(2024, 2, 12, 9, 30)), config=LayoutConfig())
        self.assertEqual((override.window.start_hour, override.window.end_hour), (8, 11))

    def test_built_schedule_items_are_still_checked(self):
        bad = ScheduleItem(id="bad", day_of_week="Monday", start_time="10:00", end_time="09:00")
        good = ScheduleItem(id="good", day_of_week="Monday", start_time="09:00", end_time="10:00")
        sv = build_schedule_view([bad, good], day="Monday", clock=FixedClock(MONDAY_0915))
        self.assertEqual([e.item.id for e in sv.layout.entries], ["good"])
        self.assertEqual([(w.record_id, w.kind) for w in sv.warnings], [("bad", "invalid_range")])

    def test_accepts_flat_list(self):
        flat = [
            {"_id": "x", "dayOfWeek": "Tuesday", "startTime": "10:00", "endTime": "11:00"},
        ]
        sv = build_schedule_view(flat, day="Tuesday", clock=FixedClock(MONDAY_0915))
        self.assertEqual([e.item.id for e in sv.layout.entries], ["x"])


class TestExportContract(unittest.TestCase):
    def test_month_payload_shape(self):
        cv = build_calendar_view(_events(), view="month", anchor=dt.date(2024, 2, 1), today=dt.date(2024, 2, 14))
        d = calendar_view_to_dict(cv)
        self.assertEqual(d["view"], "month")
        self.assertEqual(len(d["cells"]), 42)
        cell = [c for c in d["cells"] if c["date"] == "2024-02-14"][0]
        self.assertEqual(
            set(cell.keys()), {"dayNumber", "date", "isCurrentMonth", "isToday", "events", "overflow"}
        )
        self.assertTrue(cell["isToday"])
        self.assertEqual([e["_id"] for e in cell["events"]], ["ev1", "ev8"])
        self.assertEqual(cell["events"][0]["color"], "#ef4444")
        self.assertEqual(d["warnings"][0]["kind"], "invalid_range")
        json.dumps(d)

    def test_grid_payload_shape(self):
        sv = build_schedule_view(_schedule(), day="Monday", show_grid=True, clock=FixedClock(MONDAY_0915))
        d = schedule_view_to_dict(sv)
        self.assertEqual(d["stats"], {"total": 4, "activeDays": 2, "uniqueTeachers": 3, "uniqueSubjects": 3})
        self.assertEqual(d["counts"]["Monday"], 3)
        layout = d["layout"]
        self.assertEqual(layout["window"], {"startHour": 7, "endHour": 13, "totalMinutes": 360})
        self.assertEqual(layout["currentTime"], "09:15")
        s1 = [i for i in layout["items"] if i["_id"] == "s1"][0]
        self.assertAlmostEqual(s1["topPercent"], 120 / 360 * 100)
        self.assertAlmostEqual(s1["heightPercent"], 90 / 360 * 100)
        self.assertTrue(s1["isNow"])
        self.assertEqual(s1["timeLabel"], "9:00 AM - 10:30 AM")
        self.assertEqual(s1["durationLabel"], "90 min")
        self.assertEqual(layout["slots"][0], {"time": "07:00", "isCurrentHour": False})
        json.dumps(d)

    def test_list_layout_payload(self):
        sv = build_schedule_view(_schedule(), day="Monday", clock=FixedClock(MONDAY_0915))
        d = layout_to_dict(sv.layout)
        self.assertNotIn("slots", d)
        self.assertEqual([i["_id"] for i in d["items"]], ["s3", "s1", "s2"])


if __name__ == "__main__":
    unittest.main(verbosity=2)
