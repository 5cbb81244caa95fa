"""Shared fixtures: an on-disk feature docs tree and a record factory."""

import pytest

from featureflow.lib.config import ProjectConfig
from featureflow.store.records import init_store


def record_text(status: str | None, title: str = "Some feature", files=None, body: str = "# Notes\n") -> str:
    lines = ["---"]
    if status is not None:
        lines.append(f"status: {status}")
    lines.append(f"title: {title}")
    lines.append("affected-files:")
    for f in files or []:
        lines.append(f"  - {f}")
    lines.append("---")
    return "\n".join(lines) + "\n\n" + body


@pytest.fixture
def docs_dir(tmp_path):
    """feature-docs/ with every lifecycle directory created."""
    d = tmp_path / "feature-docs"
    init_store(d)
    return d


@pytest.fixture
def make_record(docs_dir):
    """Write a record file into a stage directory and return its path.

    Status defaults to the directory's name, so records are consistent
    unless a test says otherwise.
    """
    def _make(stage: str, name: str, status: str | None = "__stage__", title: str = "Some feature", files=None):
        if status == "__stage__":
            status = stage
        path = docs_dir / stage / name
        path.write_text(record_text(status, title, files))
        return path
    return _make


@pytest.fixture
def project_config(tmp_path, docs_dir):
    return ProjectConfig(
        project_dir=tmp_path,
        docs_dir=docs_dir,
        stack="python",
        agent_logs_dir=None,
    )
