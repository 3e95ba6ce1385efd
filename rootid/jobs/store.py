"""
Per-job parameter stores.

A store owns one job's parameter set. The set is read as an immutable
snapshot and written back whole with ``replace_all``; ``delete`` drops the
parameter set property altogether.

No locking is done here. Two writers targeting the same job race and the
last ``replace_all`` wins.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Iterable

import frontmatter

from ..models import ParameterDefinition, ParameterSet, parameter_from_dict

logger = logging.getLogger(__name__)

PARAMETERS_KEY = "parameters"


def parse_parameters(value: Any) -> ParameterSet | None:
    """Parse the ``parameters`` frontmatter field (None means no parameter set)."""
    if value is None:
        return None
    if not isinstance(value, list):
        raise ValueError(f"'{PARAMETERS_KEY}' must be a list, got {type(value).__name__}")

    definitions: list[ParameterDefinition] = []
    for raw in value:
        if not isinstance(raw, dict):
            raise ValueError(f"parameter definition must be a mapping, got {raw!r}")
        definitions.append(parameter_from_dict(raw))
    return ParameterSet(tuple(definitions))


class ParameterStore(ABC):
    """Storage contract for one job's parameter set."""

    job_name: str

    @abstractmethod
    def snapshot(self) -> ParameterSet | None:
        """Current parameter set, or None when the job has none."""
        ...

    @abstractmethod
    def replace_all(self, definitions: Iterable[ParameterDefinition]) -> None:
        """Install ``definitions`` as the job's parameter set."""
        ...

    @abstractmethod
    def delete(self) -> None:
        """Remove the parameter set property from the job."""
        ...

    def get(self, name: str) -> ParameterDefinition | None:
        current = self.snapshot()
        if current is None:
            return None
        return current.get(name)

    def add(self, definition: ParameterDefinition) -> None:
        current = self.snapshot() or ParameterSet()
        self.replace_all(current.with_definition(definition))

    def remove(self, name: str) -> None:
        current = self.snapshot()
        if current is None or current.get(name) is None:
            return
        self.replace_all(current.without(name))


StoreLookup = Callable[[str], ParameterStore]


class InMemoryParameterStore(ParameterStore):
    """Parameter store held in memory."""

    def __init__(self, job_name: str, parameters: ParameterSet | None = None):
        self.job_name = job_name
        self.parameters = parameters

    def snapshot(self) -> ParameterSet | None:
        return self.parameters

    def replace_all(self, definitions: Iterable[ParameterDefinition]) -> None:
        self.parameters = ParameterSet(tuple(definitions))

    def delete(self) -> None:
        self.parameters = None


class InMemoryStores:
    """Store lookup that creates empty in-memory stores on first use."""

    def __init__(self, initial: dict[str, ParameterSet | None] | None = None):
        self._stores: dict[str, InMemoryParameterStore] = {}
        for name, parameters in (initial or {}).items():
            self._stores[name] = InMemoryParameterStore(name, parameters)

    def __call__(self, job_name: str) -> InMemoryParameterStore:
        store = self._stores.get(job_name)
        if store is None:
            store = InMemoryParameterStore(job_name)
            self._stores[job_name] = store
        return store


class JobFileParameterStore(ParameterStore):
    """
    Parameter store backed by a job definition file.

    The parameter set lives in the ``parameters`` frontmatter field; other
    frontmatter fields and the description body are preserved on write.
    I/O errors (missing file, permissions) propagate as ``OSError``.
    """

    def __init__(self, job_name: str, path: Path):
        self.job_name = job_name
        self.path = path

    def _load(self) -> frontmatter.Post:
        return frontmatter.load(self.path)

    def _write(self, post: frontmatter.Post) -> None:
        # Swapped in whole; a failed write leaves the job file untouched
        text = frontmatter.dumps(post, sort_keys=False) + "\n"
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            shutil.copymode(self.path, tmp_name)
            os.replace(tmp_name, self.path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def snapshot(self) -> ParameterSet | None:
        return parse_parameters(self._load().metadata.get(PARAMETERS_KEY))

    def replace_all(self, definitions: Iterable[ParameterDefinition]) -> None:
        parameters = ParameterSet(tuple(definitions))
        post = self._load()
        post.metadata[PARAMETERS_KEY] = parameters.to_list()
        self._write(post)
        logger.debug("Wrote %d parameter(s) to %s", len(parameters), self.path)

    def delete(self) -> None:
        post = self._load()
        if PARAMETERS_KEY not in post.metadata:
            return
        del post.metadata[PARAMETERS_KEY]
        self._write(post)
        logger.debug("Removed parameter set from %s", self.path)
