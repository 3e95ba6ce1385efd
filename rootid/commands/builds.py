"""Build-time commands: compute, propagate and clean up the root identifier."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ..audit_log import ChangeSummary, log_operation
from ..cleanup import CleanupService
from ..identifier import build_environment, compute_root_identifier
from ..jobs.graph import DependencyGraph
from ..jobs.loader import Workspace, load_workspace
from ..models import BuildContext, UpstreamCause
from ..propagation import PropagationEngine, PropagationResult


def open_workspace(workspace_path: Path, err: Console) -> Workspace | None:
    try:
        return load_workspace(workspace_path)
    except ValueError as e:
        err.print(f"Invalid workspace: {escape(str(e))}", style="bold red")
        return None


def build_context(
    job: str,
    build_number: int,
    *,
    upstream_job: str | None = None,
    upstream_build: int | None = None,
    env: dict[str, str] | None = None,
) -> BuildContext:
    """Assemble the context a host would hand over for a running build."""
    cause = None
    if upstream_job:
        cause = UpstreamCause(job_name=upstream_job, build_number=upstream_build or 0)
    return BuildContext(
        job_name=job,
        build_number=build_number,
        upstream_cause=cause,
        env=build_environment(job, build_number, env),
    )


def _changes(result: PropagationResult) -> ChangeSummary:
    changes = ChangeSummary()
    for name, outcome in result.outcomes.items():
        getattr(changes, outcome).append(name)
    return changes


def run_identifier(job: str, build_number: int, *, env: dict[str, str] | None = None) -> int:
    """Print the identifier a root build of ``job`` would get."""
    print(compute_root_identifier(build_environment(job, build_number, env)))
    return 0


def run_propagate(
    workspace_path: Path,
    job: str,
    build_number: int,
    *,
    upstream_job: str | None = None,
    upstream_build: int | None = None,
    env: dict[str, str] | None = None,
    output_json: bool = False,
) -> int:
    """Propagate the identifier of a build to its direct downstream jobs.

    Store errors are not caught here; the caller decides how the build fails.
    """
    err = Console(stderr=True)
    workspace = open_workspace(workspace_path, err)
    if workspace is None:
        return 1
    if workspace.get(job) is None:
        err.print(f"Job not found: {escape(job)}", style="bold red")
        return 1

    build = build_context(
        job,
        build_number,
        upstream_job=upstream_job,
        upstream_build=upstream_build,
        env=env,
    )
    engine = PropagationEngine(DependencyGraph.from_jobs(workspace.jobs.values()), workspace.store)
    result = engine.propagate_to_downstream(build)

    metadata = {}
    if build.upstream_cause is not None:
        metadata["upstream"] = f"{build.upstream_cause.job_name} #{build.upstream_cause.build_number}"
    log_operation(
        workspace_path,
        "propagate",
        job,
        build_number,
        identifier=result.identifier,
        changes=_changes(result),
        metadata=metadata,
    )

    if output_json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    console = Console()
    if result.identifier is None:
        console.print(f"[yellow]{escape(job)} #{build_number}: no identifier to propagate[/yellow]")
        return 0

    source = "root" if result.is_root else "inherited"
    console.print(f"[bold]{escape(result.identifier)}[/bold] ({source})")
    if not result.outcomes:
        console.print("No downstream jobs.")
    for name, outcome in result.outcomes.items():
        style = {"created": "green", "updated": "cyan", "skipped": "yellow"}[outcome]
        console.print(f"  {escape(name)}: [{style}]{outcome}[/{style}]")
    return 0


def run_cleanup(workspace_path: Path, job: str, build_number: int) -> int:
    """Remove the identifier parameter from a finished build's job."""
    err = Console(stderr=True)
    workspace = open_workspace(workspace_path, err)
    if workspace is None:
        return 1
    if workspace.get(job) is None:
        err.print(f"Job not found: {escape(job)}", style="bold red")
        return 1

    removed = CleanupService(workspace.store).remove_identifier(build_context(job, build_number))

    changes = ChangeSummary(removed=[job] if removed else [])
    log_operation(workspace_path, "cleanup", job, build_number, changes=changes)

    console = Console()
    if removed:
        console.print(f"Removed identifier from {escape(job)}")
    else:
        console.print(f"{escape(job)} has no identifier parameter")
    return 0
