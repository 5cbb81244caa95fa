"""
Data models for the feature record store.
"""

from dataclasses import dataclass, field
from pathlib import Path

from featureflow.lib.types import Stage, StatusField


@dataclass
class FeatureRecord:
    """A tracked unit of work.

    The record's stage is the directory it lives in; `status` is what its
    header claims. The two must agree.
    """
    id: str                                    # "007", from the NNN- filename prefix
    title: str
    status: StatusField
    stage: Stage                               # directory the file lives in
    path: Path
    owned_files: list[str] = field(default_factory=list)   # affected-files
    body: str = ""

    @property
    def filename(self) -> str:
        return self.path.name

    @property
    def display_title(self) -> str:
        return self.title or self.path.stem

    @property
    def is_consistent(self) -> bool:
        """Missing status counts as consistent; only a wrong value does not."""
        return self.status.is_missing or self.status.matches(self.stage)

    def relpath(self, docs_dir: Path) -> str:
        """Path relative to the docs root, e.g. `testing/003-login.md`."""
        try:
            return self.path.relative_to(docs_dir).as_posix()
        except ValueError:
            return str(self.path)
