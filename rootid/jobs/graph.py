"""Job dependency graph construction and traversal."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Protocol

from ..models import Job


class DownstreamProvider(Protocol):
    """Anything that can list a job's direct downstream jobs."""

    def downstream_of(self, job_name: str) -> list[str]:
        ...


@dataclass
class DependencyGraph:
    """Directed graph of trigger relations (upstream -> downstream).

    Edge lists keep insertion order so traversal is deterministic.
    """

    nodes: list[str] = field(default_factory=list)
    edges: dict[str, list[str]] = field(default_factory=dict)  # job -> downstream jobs
    reverse_edges: dict[str, list[str]] = field(default_factory=dict)  # job -> upstream jobs

    @classmethod
    def from_jobs(cls, jobs: Iterable[Job]) -> DependencyGraph:
        """Build graph from job definitions.

        A job's ``downstream`` list and every other job's ``upstream`` list
        both produce edges.
        """
        graph = cls()
        jobs = list(jobs)

        for job in jobs:
            graph.add_node(job.name)

        for job in jobs:
            for child in job.downstream:
                graph.add_edge(job.name, child)
            for parent in job.upstream:
                graph.add_edge(parent, job.name)

        return graph

    @classmethod
    def from_edges(cls, edges: Iterable[tuple[str, str]]) -> DependencyGraph:
        graph = cls()
        for upstream, downstream in edges:
            graph.add_edge(upstream, downstream)
        return graph

    def add_node(self, name: str) -> None:
        if name not in self.edges:
            self.nodes.append(name)
            self.edges[name] = []
            self.reverse_edges[name] = []

    def add_edge(self, upstream: str, downstream: str) -> None:
        self.add_node(upstream)
        self.add_node(downstream)
        if downstream not in self.edges[upstream]:
            self.edges[upstream].append(downstream)
            self.reverse_edges[downstream].append(upstream)

    def downstream_of(self, job_name: str) -> list[str]:
        """Direct downstream jobs, in edge order."""
        return list(self.edges.get(job_name, []))

    def upstream_of(self, job_name: str) -> list[str]:
        """Direct upstream jobs, in edge order."""
        return list(self.reverse_edges.get(job_name, []))

    def downstream_closure(self, start: str) -> list[str]:
        """All jobs transitively downstream of ``start`` in breadth-first order.

        ``start`` itself is excluded unless it sits on a cycle.
        """
        visited: set[str] = set()
        order: list[str] = []
        queue = list(self.edges.get(start, []))

        while queue:
            current = queue.pop(0)
            if current in visited:
                continue
            visited.add(current)
            order.append(current)
            for child in self.edges.get(current, []):
                if child not in visited:
                    queue.append(child)

        return order

    def topological_sort(self) -> list[str]:
        """Return jobs with every upstream before its downstream (Kahn's algorithm).

        Jobs on a cycle are left out.
        """
        in_degree = {node: len(self.reverse_edges.get(node, [])) for node in self.nodes}
        queue = [node for node in self.nodes if in_degree[node] == 0]
        result = []

        while queue:
            node = queue.pop(0)
            result.append(node)
            for child in self.edges.get(node, []):
                in_degree[child] -= 1
                if in_degree[child] == 0:
                    queue.append(child)

        return result

    def find_cycles(self) -> list[list[str]]:
        """Find cycles using Tarjan's strongly connected components.

        Self-loops count as cycles of one job.
        """
        index_counter = [0]
        stack: list[str] = []
        lowlinks: dict[str, int] = {}
        index: dict[str, int] = {}
        on_stack: dict[str, bool] = {}
        sccs: list[list[str]] = []

        def strongconnect(node: str) -> None:
            index[node] = index_counter[0]
            lowlinks[node] = index_counter[0]
            index_counter[0] += 1
            stack.append(node)
            on_stack[node] = True

            for child in self.edges.get(node, []):
                if child not in index:
                    strongconnect(child)
                    lowlinks[node] = min(lowlinks[node], lowlinks[child])
                elif on_stack.get(child, False):
                    lowlinks[node] = min(lowlinks[node], index[child])

            if lowlinks[node] == index[node]:
                scc = []
                while True:
                    w = stack.pop()
                    on_stack[w] = False
                    scc.append(w)
                    if w == node:
                        break
                if len(scc) > 1 or node in self.edges.get(node, []):
                    sccs.append(list(reversed(scc)))

        for node in self.nodes:
            if node not in index:
                strongconnect(node)

        return sccs
