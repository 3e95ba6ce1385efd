"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from rootid.jobs.graph import DependencyGraph
from rootid.jobs.loader import Workspace, load_workspace


def write_job(
    jobs_dir: Path,
    name: str,
    *,
    downstream: list[str] | None = None,
    upstream: list[str] | None = None,
    parameters: list[str] | None = None,
    body: str = "",
) -> Path:
    """Write a job definition file. ``parameters`` are raw YAML flow mappings."""
    lines = ["---"]
    lines.append(f"downstream: [{', '.join(downstream or [])}]")
    if upstream:
        lines.append(f"upstream: [{', '.join(upstream)}]")
    if parameters is not None:
        lines.append("parameters:")
        lines.extend(f"  - {p}" for p in parameters)
    lines.append("---")
    lines.append("")
    lines.append(body or f"Builds {name}.")
    lines.append("")

    path = jobs_dir / f"{name}.md"
    path.write_text("\n".join(lines), encoding="utf-8")
    return path


@pytest.fixture
def workspace_path(tmp_path: Path) -> Path:
    """
    A small pipeline:

        core-lib -> app-server -> integration
                 -> app-client
                 -> legacy       (identifier key taken by a choice parameter)
    """
    root = tmp_path / "pipeline"
    jobs = root / "jobs"
    jobs.mkdir(parents=True)

    write_job(jobs, "core-lib", downstream=["app-server", "app-client", "legacy"])
    write_job(
        jobs,
        "app-server",
        parameters=["{name: DEPLOY, type: boolean, default: false}"],
        body="Server build. Deploys when DEPLOY is set.",
    )
    write_job(jobs, "app-client")
    write_job(
        jobs,
        "legacy",
        parameters=["{name: buildInfo.build.root, type: choice, choices: [a, b]}"],
    )
    write_job(jobs, "integration", upstream=["app-server"])
    return root


@pytest.fixture
def workspace(workspace_path: Path) -> Workspace:
    return load_workspace(workspace_path)


@pytest.fixture
def workspace_graph(workspace: Workspace) -> DependencyGraph:
    return DependencyGraph.from_jobs(workspace.jobs.values())


@pytest.fixture
def job_writer():
    """The ``write_job`` helper, for tests that build their own job files."""
    return write_job
