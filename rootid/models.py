"""Data models for jobs, builds and parameter definitions."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Literal, Union


@dataclass(frozen=True)
class StringParameter:
    """
    A string-typed parameter definition with a default value.

    When loaded from a job file, ``raw`` holds the mapping as written. It is
    merged back on write so fields other than ``default`` stay as they were.
    """

    name: str
    default: str = ""
    description: str = ""
    kind: Literal["string"] = "string"
    raw: dict[str, Any] = field(default_factory=dict, compare=False)

    def with_default(self, value: str) -> StringParameter:
        return replace(self, default=value)

    def to_dict(self) -> dict[str, Any]:
        if not self.raw:
            d: dict[str, Any] = {"name": self.name, "type": self.kind, "default": self.default}
            if self.description:
                d["description"] = self.description
            return d

        d = dict(self.raw)
        d["name"] = self.name
        # An unchanged default keeps its written form (absent, or a YAML int)
        if _default_text(self.raw.get("default")) != self.default:
            d["default"] = self.default
        return d


def _default_text(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass(frozen=True)
class OpaqueParameter:
    """
    Any non-string parameter definition (boolean, choice, password, ...).

    The raw mapping is kept verbatim so the definition can be written back
    without losing fields this package does not understand.
    """

    name: str
    kind: str
    raw: dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> dict[str, Any]:
        d = dict(self.raw)
        d["name"] = self.name
        d["type"] = self.kind
        return d


ParameterDefinition = Union[StringParameter, OpaqueParameter]


def parameter_from_dict(data: dict[str, Any]) -> ParameterDefinition:
    """Build a parameter definition from its serialized form."""
    name = str(data.get("name", "")).strip()
    if not name:
        raise ValueError("parameter definition requires a name")

    kind = str(data.get("type", "string")).strip() or "string"
    if kind == "string":
        return StringParameter(
            name=name,
            default=_default_text(data.get("default")),
            description=str(data.get("description") or ""),
            raw=dict(data),
        )
    return OpaqueParameter(name=name, kind=kind, raw=dict(data))


@dataclass(frozen=True)
class ParameterSet:
    """Ordered, immutable collection of a job's parameter definitions.

    Names are unique within a set. Every "mutation" returns a new set.
    """

    definitions: tuple[ParameterDefinition, ...] = ()

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for definition in self.definitions:
            if definition.name in seen:
                raise ValueError(f"duplicate parameter definition: {definition.name}")
            seen.add(definition.name)

    @classmethod
    def of(cls, *definitions: ParameterDefinition) -> ParameterSet:
        return cls(tuple(definitions))

    def __len__(self) -> int:
        return len(self.definitions)

    def __iter__(self):
        return iter(self.definitions)

    @property
    def names(self) -> list[str]:
        return [d.name for d in self.definitions]

    def get(self, name: str) -> ParameterDefinition | None:
        for definition in self.definitions:
            if definition.name == name:
                return definition
        return None

    def with_definition(self, definition: ParameterDefinition) -> ParameterSet:
        """Replace the definition of the same name in place, or append it."""
        replaced = False
        result: list[ParameterDefinition] = []
        for existing in self.definitions:
            if existing.name == definition.name:
                result.append(definition)
                replaced = True
            else:
                result.append(existing)
        if not replaced:
            result.append(definition)
        return ParameterSet(tuple(result))

    def without(self, name: str) -> ParameterSet:
        return ParameterSet(tuple(d for d in self.definitions if d.name != name))

    def to_list(self) -> list[dict[str, Any]]:
        return [d.to_dict() for d in self.definitions]


@dataclass(frozen=True)
class UpstreamCause:
    """The build that triggered the current one."""

    job_name: str
    build_number: int


@dataclass
class BuildContext:
    """An executing build as seen by propagation and cleanup."""

    job_name: str
    build_number: int
    upstream_cause: UpstreamCause | None = None
    env: dict[str, str] = field(default_factory=dict)

    @property
    def is_root(self) -> bool:
        return self.upstream_cause is None


@dataclass
class Job:
    """A job definition loaded from the workspace."""

    name: str
    downstream: list[str] = field(default_factory=list)
    upstream: list[str] = field(default_factory=list)
    parameters: ParameterSet | None = None  # None: job has no parameter set at all
    description: str = ""
