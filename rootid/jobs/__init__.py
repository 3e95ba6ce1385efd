"""Job workspace: definitions, dependency graph and parameter stores."""

from .graph import DependencyGraph, DownstreamProvider
from .loader import Workspace, find_workspace, load_job, load_workspace
from .store import (
    InMemoryParameterStore,
    InMemoryStores,
    JobFileParameterStore,
    ParameterStore,
    StoreLookup,
)

__all__ = [
    "DependencyGraph",
    "DownstreamProvider",
    "Workspace",
    "find_workspace",
    "load_job",
    "load_workspace",
    "InMemoryParameterStore",
    "InMemoryStores",
    "JobFileParameterStore",
    "ParameterStore",
    "StoreLookup",
]
