"""Tests for featureflow.workflow.state_machine and featureflow.workflow.fsm.

transition() is the public entry point; RecordFSM and persist_stage_change
are exercised directly where their behavior is worth pinning down.
"""

import stat

import pytest
from unittest.mock import patch

from featureflow.lib.errors import (
    ConsistencyError,
    InvalidTransition,
    RecordNotFound,
    TransitionIOError,
)
from featureflow.lib.frontmatter import parse_header
from featureflow.lib.types import Stage
from featureflow.store.records import list_records, load_record_file
from featureflow.workflow.fsm import STATES, TRANSITIONS, TRIGGER_FOR, RecordFSM
from featureflow.workflow.resolver import scan_consistency
from featureflow.workflow.state_machine import allowed_targets, can_transition, transition


class TestFSMDefinition:
    def test_states_are_stage_directories(self):
        assert STATES == ["ready", "testing", "building", "review", "completed"]

    def test_trigger_lookup(self):
        assert TRIGGER_FOR[("testing", "building")] == "start_build"
        assert TRIGGER_FOR[("review", "building")] == "rework"
        assert len(TRIGGER_FOR) == len(TRANSITIONS)


class TestCanTransition:
    def test_forward_by_one(self):
        assert can_transition("ready", "testing")
        assert can_transition(Stage.TESTING, Stage.BUILDING)
        assert can_transition("building", "review")
        assert can_transition("review", "completed")

    def test_rework(self):
        assert can_transition("review", "building")

    def test_skips_and_backwards_rejected(self):
        assert not can_transition("ready", "building")
        assert not can_transition("building", "testing")
        assert not can_transition("completed", "review")
        assert not can_transition("ready", "ready")

    def test_done_is_not_a_stage_name(self):
        assert not can_transition("review", "done")

    def test_allowed_targets(self):
        assert set(allowed_targets(Stage.REVIEW)) == {Stage.COMPLETED, Stage.BUILDING}
        assert allowed_targets(Stage.COMPLETED) == []


class TestTransition:
    """Tests for transition()."""

    def test_moves_file_and_rewrites_status(self, docs_dir, make_record):
        old = make_record("testing", "003-login.md", title="Login form", files=["src/a.ts"])
        record = transition(docs_dir, "003", "testing", "building", reason="tests written")

        assert not old.exists()
        assert record.path == docs_dir / "building" / "003-login.md"
        assert record.stage is Stage.BUILDING
        assert record.status.matches(Stage.BUILDING)
        assert record.title == "Login form"
        assert record.owned_files == ["src/a.ts"]

    def test_body_preserved(self, docs_dir, make_record):
        path = make_record("ready", "001-a.md")
        body_before = load_record_file(path, Stage.READY).body
        record = transition(docs_dir, "1", Stage.READY, Stage.TESTING)
        assert record.body == body_before

    def test_full_lifecycle_stays_consistent(self, docs_dir, make_record):
        make_record("ready", "001-a.md")
        path = [("ready", "testing"), ("testing", "building"), ("building", "review"),
                ("review", "building"), ("building", "review"), ("review", "completed")]
        for src, dest in path:
            transition(docs_dir, "001", src, dest)
            assert scan_consistency(docs_dir) == []
        [record] = list_records(docs_dir, Stage.COMPLETED)
        assert record.status.matches(Stage.COMPLETED)

    def test_invalid_transition_writes_nothing(self, docs_dir, make_record):
        path = make_record("ready", "001-a.md")
        before = path.read_text()
        with pytest.raises(InvalidTransition) as exc_info:
            transition(docs_dir, "001", "ready", "building")
        assert "testing" in exc_info.value.allowed
        assert path.read_text() == before
        assert list((docs_dir / "building").iterdir()) == []

    def test_unknown_stage_rejected(self, docs_dir, make_record):
        make_record("ready", "001-a.md")
        with pytest.raises(InvalidTransition):
            transition(docs_dir, "001", "ready", "shipped")

    def test_record_not_in_source_stage(self, docs_dir, make_record):
        make_record("building", "001-a.md")
        with pytest.raises(RecordNotFound) as exc_info:
            transition(docs_dir, "001", "testing", "building")
        assert exc_info.value.stage == "testing"

    def test_inconsistent_record_rejected(self, docs_dir, make_record):
        path = make_record("testing", "001-a.md", status="building")
        with pytest.raises(ConsistencyError):
            transition(docs_dir, "001", "testing", "building")
        assert path.exists()

    def test_record_without_status_gets_one(self, docs_dir, make_record):
        make_record("ready", "001-a.md", status=None)
        record = transition(docs_dir, "001", "ready", "testing")
        assert record.status.matches(Stage.TESTING)

    def test_target_exists_is_io_error_without_changes(self, docs_dir, make_record):
        path = make_record("testing", "001-a.md")
        make_record("building", "001-a.md")
        before = path.read_text()
        with pytest.raises(TransitionIOError) as exc_info:
            transition(docs_dir, "001", "testing", "building")
        assert "No changes were made" in str(exc_info.value)
        assert path.read_text() == before

    def test_quoted_status_key_is_rewritten(self, docs_dir, make_record):
        path = make_record("ready", "001-a.md")
        path.write_text(path.read_text().replace("status: ready", '"status": ready'))
        record = transition(docs_dir, "001", "ready", "testing")
        assert record.status.matches(Stage.TESTING)
        assert record.path.read_text().count("status") == 1
        assert scan_consistency(docs_dir) == []

    def test_rewrite_that_does_not_read_back_is_rejected(self, docs_dir, make_record):
        path = make_record("ready", "001-a.md")
        before = path.read_text()
        with patch("featureflow.workflow.fsm.set_status", side_effect=lambda text, stage: text):
            with pytest.raises(TransitionIOError) as exc_info:
                transition(docs_dir, "001", "ready", "testing")
        assert exc_info.value.step == "rewriting the status field"
        assert path.read_text() == before
        assert list((docs_dir / "testing").iterdir()) == []

    def test_file_mode_preserved(self, docs_dir, make_record):
        path = make_record("ready", "001-a.md")
        path.chmod(0o644)
        record = transition(docs_dir, "001", "ready", "testing")
        assert stat.S_IMODE(record.path.stat().st_mode) == 0o644

    def test_failed_move_reports_manual_fix(self, docs_dir, make_record):
        path = make_record("testing", "001-a.md")
        with patch("pathlib.Path.rename", side_effect=OSError("disk full")):
            with pytest.raises(TransitionIOError) as exc_info:
                transition(docs_dir, "001", "testing", "building")
        assert exc_info.value.step == "moving the file"
        assert "set the status back to testing" in str(exc_info.value)
        # Half-done: new status in the old directory, which the scan reports
        assert parse_header(path.read_text()).status.matches(Stage.BUILDING)
        assert len(scan_consistency(docs_dir)) == 1


class TestRecordFSM:
    def test_initial_state_is_directory(self, docs_dir, make_record):
        path = make_record("review", "001-a.md")
        fsm = RecordFSM(load_record_file(path, Stage.REVIEW), docs_dir)
        assert fsm.state == "review"
        assert set(fsm.get_available_triggers()) == {"approve", "rework"}
        assert fsm.can("approve")
        assert not fsm.can("start_tests")

    def test_trigger_persists_and_calls_back(self, docs_dir, make_record):
        path = make_record("review", "001-a.md")
        seen = []
        fsm = RecordFSM(
            load_record_file(path, Stage.REVIEW), docs_dir,
            on_transition=lambda src, dest, trigger: seen.append((src, dest, trigger)),
        )
        fsm.rework()
        assert fsm.state == "building"
        assert fsm.path == docs_dir / "building" / "001-a.md"
        assert fsm.path.exists()
        assert seen == [("review", "building", "rework")]

    def test_logs_stage_change(self, docs_dir, make_record, caplog):
        make_record("ready", "001-a.md")
        with caplog.at_level("INFO"):
            transition(docs_dir, "001", "ready", "testing")
        assert "[STAGE] 001: ready -> testing" in caplog.text
