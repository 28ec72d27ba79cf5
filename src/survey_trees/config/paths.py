from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path

@dataclass(frozen=True)
class ProjectPaths:
    root: Path

    @property
    def data(self) -> Path:
        return self.root / "data"

    @property
    def raw(self) -> Path:
        return self.data / "raw"

    @property
    def survey(self) -> Path:
        return self.raw / "election_survey.csv"

    @property
    def outputs(self) -> Path:
        return self.root / "outputs"

    @property
    def figures(self) -> Path:
        return self.outputs / "figures"


def get_project_root() -> Path:
    # repo_root/src/survey_trees/config/paths.py -> repo_root
    return Path(__file__).resolve().parents[3]


PATHS = ProjectPaths(root=get_project_root())
