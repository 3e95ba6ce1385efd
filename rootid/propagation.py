"""
Identifier propagation from a build to its direct downstream jobs.

A root build (no upstream cause) computes its identifier from the build
environment. A derived build inherits the identifier stored in its own
job's parameter set and passes it on verbatim.

Downstream writes are applied one job at a time. A store error stops the
loop and propagates to the caller; jobs already written keep their value.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Literal

from .identifier import BUILD_ROOT_PARAMETER_KEY, compute_root_identifier
from .jobs.graph import DownstreamProvider
from .jobs.store import ParameterStore, StoreLookup
from .models import BuildContext, ParameterSet, StringParameter
from .template import TemplateResolver, resolve

logger = logging.getLogger(__name__)

Outcome = Literal["created", "updated", "skipped"]


def read_identifier(store: ParameterStore) -> str | None:
    """
    Read the identifier stored on a job.

    Returns None when the job has no parameter set, no identifier parameter,
    or an identifier parameter that is not string-typed.
    """
    definition = store.get(BUILD_ROOT_PARAMETER_KEY)
    if definition is None:
        return None
    if not isinstance(definition, StringParameter):
        logger.debug(
            "Ignoring %s on %s: expected a string parameter, found %s",
            BUILD_ROOT_PARAMETER_KEY,
            store.job_name,
            definition.kind,
        )
        return None
    return definition.default


@dataclass
class PropagationResult:
    """What one propagation run did."""

    job_name: str
    is_root: bool
    identifier: str | None = None
    outcomes: dict[str, Outcome] = field(default_factory=dict)  # downstream job -> outcome

    def to_dict(self) -> dict[str, Any]:
        return {
            "job": self.job_name,
            "root": self.is_root,
            "identifier": self.identifier,
            "downstream": dict(self.outcomes),
        }


class PropagationEngine:
    """Writes a build's identifier into every direct downstream job."""

    def __init__(
        self,
        graph: DownstreamProvider,
        stores: StoreLookup,
        resolver: TemplateResolver = resolve,
    ):
        self.graph = graph
        self.stores = stores
        self.resolver = resolver

    def resolve_identifier(self, build: BuildContext) -> str | None:
        """Computed identifier for a root build, inherited one for a derived build."""
        if build.is_root:
            return compute_root_identifier(build.env, self.resolver)
        return read_identifier(self.stores(build.job_name))

    def propagate_to_downstream(self, build: BuildContext) -> PropagationResult:
        result = PropagationResult(job_name=build.job_name, is_root=build.is_root)

        identifier = self.resolve_identifier(build)
        if identifier is None:
            logger.debug("%s #%s carries no identifier; nothing to propagate", build.job_name, build.build_number)
            return result
        result.identifier = identifier

        for downstream in self.graph.downstream_of(build.job_name):
            result.outcomes[downstream] = self._write(self.stores(downstream), identifier)

        return result

    def _write(self, store: ParameterStore, identifier: str) -> Outcome:
        current = store.snapshot()
        existing = current.get(BUILD_ROOT_PARAMETER_KEY) if current is not None else None

        if existing is None:
            definition = StringParameter(name=BUILD_ROOT_PARAMETER_KEY, default=identifier)
            updated = (current or ParameterSet()).with_definition(definition)
            store.replace_all(updated)
            logger.info("Created %s=%s on %s", BUILD_ROOT_PARAMETER_KEY, identifier, store.job_name)
            return "created"

        if not isinstance(existing, StringParameter):
            logger.debug(
                "Skipping %s: %s is a %s parameter",
                store.job_name,
                BUILD_ROOT_PARAMETER_KEY,
                existing.kind,
            )
            return "skipped"

        store.replace_all(current.with_definition(existing.with_default(identifier)))
        logger.info("Updated %s=%s on %s", BUILD_ROOT_PARAMETER_KEY, identifier, store.job_name)
        return "updated"
