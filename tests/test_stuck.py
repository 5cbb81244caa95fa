"""Tests for featureflow.workflow.stuck module."""

import os

from featureflow.workflow.stuck import check_stuck, format_stuck_warning

# Whole seconds, so elapsed-time arithmetic is exact
NOW = 1_700_000_000


def _age(path, minutes):
    mtime = NOW - minutes * 60
    os.utime(path, (mtime, mtime))


class TestCheckStuck:
    def test_stuck_after_threshold(self, docs_dir, make_record):
        path = make_record("building", "003-login.md", title="Login form")
        _age(path, 31)
        [stuck] = check_stuck(docs_dir, 30, now=NOW)
        assert stuck.record_id == "003"
        assert stuck.elapsed_minutes == 31
        assert format_stuck_warning(stuck) == "Stuck: Login form has been in building for 31 minutes"

    def test_not_stuck_before_threshold(self, docs_dir, make_record):
        _age(make_record("building", "003-x.md"), 10)
        assert check_stuck(docs_dir, 30, now=NOW) == []

    def test_exactly_at_threshold_is_not_stuck(self, docs_dir, make_record):
        _age(make_record("building", "003-x.md"), 30)
        assert check_stuck(docs_dir, 30, now=NOW) == []

    def test_partial_minute_over_threshold_is_not_stuck(self, docs_dir, make_record):
        _age(make_record("building", "003-x.md"), 30.5)
        assert check_stuck(docs_dir, 30, now=NOW) == []

    def test_only_building_is_checked(self, docs_dir, make_record):
        _age(make_record("testing", "001-a.md"), 120)
        _age(make_record("review", "002-b.md"), 120)
        assert check_stuck(docs_dir, 30, now=NOW) == []

    def test_detection_does_not_touch_files(self, docs_dir, make_record):
        path = make_record("building", "003-x.md")
        _age(path, 45)
        before = path.stat().st_mtime
        check_stuck(docs_dir, 30, now=NOW)
        assert path.stat().st_mtime == before
