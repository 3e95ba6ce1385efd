"""Preview the build-root property an artifact deployment would carry."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ..annotate import DeployDescriptor, annotate_from_environment, annotate_from_upstream
from ..identifier import build_environment
from .builds import open_workspace


def run_annotate(
    workspace_path: Path,
    job: str,
    build_number: int,
    artifact_path: str,
    *,
    repository: str = "",
    inherited: bool = False,
    output_json: bool = False,
) -> int:
    """
    Print the deploy descriptor for ``artifact_path``.

    By default the identifier is computed as for a root build. With
    ``inherited`` the identifier stored on the job itself is used (a derived
    build), and the artifact is left unannotated if the job carries none.
    """
    err = Console(stderr=True)
    workspace = open_workspace(workspace_path, err)
    if workspace is None:
        return 1
    if workspace.get(job) is None:
        err.print(f"Job not found: {escape(job)}", style="bold red")
        return 1

    descriptor = DeployDescriptor(artifact_path=artifact_path, target_repository=repository)
    if inherited:
        annotate_from_upstream(descriptor, workspace.store(job))
    else:
        annotate_from_environment(descriptor, build_environment(job, build_number))

    if output_json:
        print(json.dumps(descriptor.to_dict(), indent=2))
        return 0

    console = Console()
    console.print(escape(descriptor.deploy_path()), soft_wrap=True)
    return 0
