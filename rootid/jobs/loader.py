"""Job workspace loading."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import frontmatter
import yaml

from ..models import Job
from .store import PARAMETERS_KEY, JobFileParameterStore, parse_parameters

JOBS_DIR = "jobs"
STATE_DIR = ".rootid"


@dataclass
class Workspace:
    """All job definitions found under ``<path>/jobs``."""

    path: Path
    jobs: dict[str, Job] = field(default_factory=dict)
    job_paths: dict[str, Path] = field(default_factory=dict)

    @property
    def jobs_dir(self) -> Path:
        return self.path / JOBS_DIR

    @property
    def state_dir(self) -> Path:
        return self.path / STATE_DIR

    def get(self, name: str) -> Job | None:
        return self.jobs.get(name)

    def require(self, name: str) -> Job:
        job = self.jobs.get(name)
        if job is None:
            raise ValueError(f"Unknown job: {name}")
        return job

    def store(self, name: str) -> JobFileParameterStore:
        """Parameter store for a job (a StoreLookup)."""
        self.require(name)
        return JobFileParameterStore(name, self.job_paths[name])


def _string_list(value: Any, field_name: str, path: Path) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ValueError(f"{path.name}: '{field_name}' must be a list of job names")
    return [str(v).strip() for v in value if str(v).strip()]


def load_job(path: Path) -> Job:
    """Load a single job definition file."""
    try:
        post = frontmatter.load(path)
    except yaml.YAMLError as e:
        raise ValueError(f"{path.name}: invalid frontmatter: {e}") from e
    fm = post.metadata

    try:
        parameters = parse_parameters(fm.get(PARAMETERS_KEY))
    except ValueError as e:
        raise ValueError(f"{path.name}: {e}") from e

    return Job(
        name=path.stem,
        downstream=_string_list(fm.get("downstream"), "downstream", path),
        upstream=_string_list(fm.get("upstream"), "upstream", path),
        parameters=parameters,
        description=post.content.strip(),
    )


def load_workspace(workspace_path: Path) -> Workspace:
    """Load every ``jobs/*.md`` file of a workspace.

    Raises:
        ValueError: a job file is malformed or references an unknown job.
    """
    workspace = Workspace(path=workspace_path)

    for md_file in sorted(workspace.jobs_dir.glob("*.md")):
        if md_file.name.startswith("."):
            continue
        job = load_job(md_file)
        workspace.jobs[job.name] = job
        workspace.job_paths[job.name] = md_file

    for job in workspace.jobs.values():
        for ref in job.downstream + job.upstream:
            if ref not in workspace.jobs:
                raise ValueError(f"{job.name}: references unknown job '{ref}'")

    return workspace


def find_workspace(start: Path) -> Path | None:
    """Find the nearest directory holding ``jobs/`` by walking up from ``start``."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        if (p / JOBS_DIR).is_dir():
            return p
    return None
