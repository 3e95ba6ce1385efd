"""Stamping the root build identifier on deployed artifacts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping
from urllib.parse import quote

from .identifier import BUILD_ROOT_MATRIX_PARAM_KEY, compute_root_identifier
from .jobs.store import ParameterStore
from .propagation import read_identifier


@dataclass
class DeployDescriptor:
    """Details of one artifact being deployed."""

    artifact_path: str
    target_repository: str = ""
    properties: dict[str, list[str]] = field(default_factory=dict)  # multimap, insertion ordered

    def add_property(self, key: str, value: str) -> None:
        self.properties.setdefault(key, []).append(value)

    def matrix_params(self) -> str:
        """Properties as a matrix-parameter suffix: ``;k=v1;k=v2``."""
        parts = []
        for key, values in self.properties.items():
            for value in values:
                parts.append(f";{quote(key, safe='.')}={quote(value, safe='')}")
        return "".join(parts)

    def deploy_path(self) -> str:
        """Upload path with matrix parameters appended."""
        base = f"{self.target_repository}/{self.artifact_path}" if self.target_repository else self.artifact_path
        return base + self.matrix_params()

    def to_dict(self) -> dict[str, Any]:
        return {
            "artifact_path": self.artifact_path,
            "target_repository": self.target_repository,
            "properties": {k: list(v) for k, v in self.properties.items()},
        }


def annotate(descriptor: DeployDescriptor, identifier: str) -> None:
    """Attach ``identifier`` under the build-root matrix key."""
    descriptor.add_property(BUILD_ROOT_MATRIX_PARAM_KEY, identifier)


def annotate_from_environment(descriptor: DeployDescriptor, env: Mapping[str, str]) -> str:
    """Annotate with the root identifier computed from a build environment."""
    identifier = compute_root_identifier(env)
    annotate(descriptor, identifier)
    return identifier


def annotate_from_upstream(descriptor: DeployDescriptor, upstream: ParameterStore) -> str | None:
    """
    Annotate with the identifier stored on the upstream build's job.

    Nothing is written when that identifier is missing or blank.
    """
    identifier = read_identifier(upstream)
    if identifier is None or not identifier.strip():
        return None
    annotate(descriptor, identifier)
    return identifier
