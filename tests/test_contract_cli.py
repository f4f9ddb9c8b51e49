from __future__ import annotations

import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest.mock import patch

import acadcal.cli as cli


REPO_ROOT = Path(__file__).resolve().parent.parent
EVENTS = REPO_ROOT / "tests" / "fixtures" / "events_sample.json"
SCHEDULE = REPO_ROOT / "tests" / "fixtures" / "schedule_sample.json"


def _run(argv: list[str]) -> tuple[int, str, str]:
    out, err = io.StringIO(), io.StringIO()
    with patch.dict(os.environ, {"ACADCAL_TZ": "UTC"}):
        with redirect_stdout(out), redirect_stderr(err):
            rc = cli.main(argv)
    return rc, out.getvalue(), err.getvalue()


class TestCliContract(unittest.TestCase):
    def test_month_to_stdout(self):
        rc, out, _err = _run(["month", "--in", str(EVENTS), "--month", "2024-02", "--today", "2024-02-14"])
        self.assertEqual(rc, 0)
        d = json.loads(out)
        self.assertEqual(d["title"], "February 2024")
        self.assertEqual(len(d["cells"]), 42)
        self.assertEqual(sum(1 for c in d["cells"] if c["isToday"]), 1)

    def test_month_with_filter_to_file(self):
        with tempfile.TemporaryDirectory() as td:
            out_path = Path(td) / "nested" / "month.json"
            rc, _out, err = _run(
                [
                    "month",
                    "--in",
                    str(EVENTS),
                    "--month",
                    "2024-02",
                    "--today",
                    "2024-02-01",
                    "--filter",
                    "type:holiday",
                    "--out",
                    str(out_path),
                    "--pretty",
                ]
            )
            self.assertEqual(rc, 0, err)
            self.assertIn("[acadcal] OK: wrote", err)
            d = json.loads(out_path.read_text(encoding="utf-8"))
        ids = {e["_id"] for c in d["cells"] for e in c["events"]}
        self.assertEqual(ids, {"ev2"})

    def test_week(self):
        rc, out, _err = _run(["week", "--in", str(EVENTS), "--date", "2024-02-28", "--today", "2024-02-29"])
        self.assertEqual(rc, 0)
        d = json.loads(out)
        self.assertEqual(d["title"], "25 February - 2 March 2024")
        self.assertEqual([c["weekday"] for c in d["columns"]][0], "Sunday")

    def test_list_type_and_order(self):
        rc, out, _err = _run(["list", "--in", str(EVENTS), "--type", "holiday", "--today", "2024-02-01"])
        self.assertEqual(rc, 0)
        d = json.loads(out)
        self.assertEqual([g["key"] for g in d["groups"]], ["2024-02-19"])
        self.assertEqual(d["groups"][0]["countLabel"], "1 event")

        rc, out, _err = _run(["list", "--in", str(EVENTS), "--order", "insertion", "--today", "2024-02-01"])
        self.assertEqual(rc, 0)
        self.assertEqual(json.loads(out)["groups"][0]["key"], "2024-02-14")

        rc, out, _err = _run(["list", "--in", str(EVENTS), "--month", "2024-03", "--today", "2024-02-01"])
        self.assertEqual(rc, 0)
        d = json.loads(out)
        self.assertEqual(d["title"], "March 2024")
        self.assertEqual([g["key"] for g in d["groups"]], ["2024-03-02"])

    def test_timeline_grid_with_fixed_now(self):
        rc, out, _err = _run(
            ["timeline", "--in", str(SCHEDULE), "--day", "monday", "--grid", "--now", "09:15", "--today", "2024-02-12"]
        )
        self.assertEqual(rc, 0)
        d = json.loads(out)
        self.assertEqual(d["day"], "Monday")
        self.assertEqual(d["layout"]["mode"], "grid")
        self.assertEqual(d["layout"]["currentTime"], "09:15")
        now_ids = [i["_id"] for i in d["layout"]["items"] if i["isNow"]]
        self.assertEqual(now_ids, ["s1"])

    def test_timeline_step(self):
        rc, out, _err = _run(
            ["timeline", "--in", str(SCHEDULE), "--day", "Tuesday", "--step", "next", "--now", "12:00", "--today", "2024-02-12"]
        )
        self.assertEqual(rc, 0)
        self.assertEqual(json.loads(out)["day"], "Wednesday")

    def test_check_reports_warnings(self):
        rc, out, _err = _run(["check", "--in", str(EVENTS)])
        self.assertEqual(rc, 1)
        d = json.loads(out)
        self.assertEqual(d["records"], 6)
        self.assertEqual(len(d["warnings"]), 3)

        rc, out, _err = _run(["check", "--in", str(SCHEDULE), "--kind", "schedule"])
        self.assertEqual(rc, 1)
        self.assertEqual(json.loads(out)["records"], 4)

    def test_check_clean_file(self):
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "ok.json"
            p.write_text(json.dumps([{"_id": "a", "startDate": "2024-02-01"}]), encoding="utf-8")
            rc, out, _err = _run(["check", "--in", str(p)])
        self.assertEqual(rc, 0)
        self.assertEqual(json.loads(out)["warnings"], [])

    def test_bad_input_exits_2(self):
        cases = [
            ["month", "--in", "/nonexistent/events.json"],
            ["month", "--in", str(EVENTS), "--month", "2024-13"],
            ["month", "--in", str(EVENTS), "--filter", "subject:"],
            ["month", "--in", str(EVENTS), "--today", "14/02/2024"],
            ["month", "--in", str(EVENTS), "--tz", "Not/AZone"],
            ["timeline", "--in", str(SCHEDULE), "--day", "Funday"],
            ["timeline", "--in", str(SCHEDULE), "--day", "Monday", "--now", "9am"],
        ]
        for argv in cases:
            rc, _out, err = _run(argv)
            self.assertEqual(rc, 2, argv)
            self.assertIn("[acadcal] ERROR:", err)

    def test_unreadable_json_exits_2(self):
        with tempfile.TemporaryDirectory() as td:
            p = Path(td) / "broken.json"
            p.write_text("{not json", encoding="utf-8")
            rc, _out, err = _run(["list", "--in", str(p)])
        self.assertEqual(rc, 2)
        self.assertIn("Failed to read records", err)


if __name__ == "__main__":
    unittest.main(verbosity=2)
