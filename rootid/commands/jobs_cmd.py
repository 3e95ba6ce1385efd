"""Read-only job inspection: parameters and trigger graph."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..identifier import BUILD_ROOT_PARAMETER_KEY
from ..jobs.graph import DependencyGraph
from ..models import StringParameter
from .builds import open_workspace


def run_show(workspace_path: Path, job: str, *, output_json: bool = False) -> int:
    """Show a job's parameter set and its direct downstream jobs."""
    err = Console(stderr=True)
    workspace = open_workspace(workspace_path, err)
    if workspace is None:
        return 1
    definition = workspace.get(job)
    if definition is None:
        err.print(f"Job not found: {escape(job)}", style="bold red")
        return 1

    graph = DependencyGraph.from_jobs(workspace.jobs.values())
    downstream = graph.downstream_of(job)
    parameters = definition.parameters

    if output_json:
        data: dict[str, Any] = {
            "job": job,
            "parameters": parameters.to_list() if parameters is not None else None,
            "downstream": downstream,
            "upstream": graph.upstream_of(job),
        }
        print(json.dumps(data, indent=2))
        return 0

    console = Console()
    console.print(f"[bold]Job: {escape(job)}[/bold]")

    if parameters is None:
        console.print("No parameter set.")
    else:
        table = Table(title="Parameters")
        table.add_column("Name", style="cyan")
        table.add_column("Type")
        table.add_column("Default")
        for p in parameters:
            name = escape(p.name)
            if p.name == BUILD_ROOT_PARAMETER_KEY:
                name = f"[bold]{name}[/bold]"
            default = p.default if isinstance(p, StringParameter) else str(p.raw.get("default", ""))
            table.add_row(name, p.kind, escape(default))
        console.print(table)

    console.print(f"Downstream: {escape(', '.join(downstream)) if downstream else '(none)'}")
    return 0


def run_graph(workspace_path: Path, *, start: str | None = None, output_json: bool = False) -> int:
    """List trigger edges, or the transitive downstream closure of ``start``."""
    err = Console(stderr=True)
    workspace = open_workspace(workspace_path, err)
    if workspace is None:
        return 1
    if start is not None and workspace.get(start) is None:
        err.print(f"Job not found: {escape(start)}", style="bold red")
        return 1

    graph = DependencyGraph.from_jobs(workspace.jobs.values())
    cycles = graph.find_cycles()

    if output_json:
        data: dict[str, Any] = {"cycles": cycles}
        if start is not None:
            data["start"] = start
            data["reachable"] = graph.downstream_closure(start)
        else:
            data["edges"] = {name: graph.downstream_of(name) for name in graph.nodes}
            data["order"] = graph.topological_sort()
        print(json.dumps(data, indent=2))
        return 0

    console = Console()
    if start is not None:
        reachable = graph.downstream_closure(start)
        console.print(f"[bold]Downstream of {escape(start)}[/bold] ({len(reachable)} jobs)")
        for name in reachable:
            console.print(f"  {escape(name)}")
    else:
        table = Table(title="Trigger graph")
        table.add_column("Job", style="cyan")
        table.add_column("Downstream")
        for name in graph.nodes:
            table.add_row(escape(name), escape(", ".join(graph.downstream_of(name))))
        console.print(table)

    for cycle in cycles:
        console.print(f"[yellow]Cycle: {escape(' -> '.join(cycle + [cycle[0]]))}[/yellow]")
    return 0
