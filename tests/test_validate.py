"""Tests for featureflow.lib.validate module."""

from pathlib import Path

import pytest

from featureflow.lib.validate import ValidationError, collect_errors, validate_before_write


def _header(**overrides):
    data = {"status": "ready", "title": "Add login form", "affected-files": ["src/login.ts"]}
    data.update(overrides)
    return data


class TestCollectErrors:
    def test_valid_header(self):
        assert collect_errors(_header()) == []

    def test_legacy_done_is_valid(self):
        assert collect_errors(_header(status="done")) == []

    def test_reports_every_problem_by_field(self):
        errors = collect_errors(_header(status="shipped", title="ab"))
        assert len(errors) == 2
        assert errors[0].startswith("status: ")
        assert errors[1].startswith("title: ")

    def test_missing_key_is_reported_on_header(self):
        data = _header()
        del data["affected-files"]
        [error] = collect_errors(data)
        assert error.startswith("(header): ")
        assert "affected-files" in error


class TestValidateBeforeWrite:
    def test_valid_header_passes(self):
        validate_before_write(_header(), Path("ready/001-add-login-form.md"))

    def test_invalid_header_names_file_and_errors(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_before_write(_header(**{"affected-files": ["/etc/passwd"]}), Path("ready/001-x.md"))
        assert "Refusing to write record 001-x.md" in str(exc_info.value)
        assert exc_info.value.errors[0].startswith("affected-files.0: ")
