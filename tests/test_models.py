"""Tests for parameter definitions and parameter sets."""

import pytest

from rootid.models import (
    BuildContext,
    OpaqueParameter,
    ParameterSet,
    StringParameter,
    UpstreamCause,
    parameter_from_dict,
)


def test_parameter_from_dict_string():
    p = parameter_from_dict({"name": "X", "type": "string", "default": 12, "description": "d"})
    assert p == StringParameter(name="X", default="12", description="d")


def test_parameter_from_dict_defaults_to_string():
    assert parameter_from_dict({"name": "X"}) == StringParameter(name="X", default="")


def test_parameter_from_dict_opaque_keeps_raw():
    raw = {"name": "CHOICE", "type": "choice", "choices": ["a", "b"]}
    p = parameter_from_dict(raw)
    assert isinstance(p, OpaqueParameter)
    assert p.kind == "choice"
    assert p.to_dict() == raw


def test_parameter_from_dict_requires_name():
    with pytest.raises(ValueError):
        parameter_from_dict({"type": "string"})


class TestParameterSet:
    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError, match="duplicate"):
            ParameterSet.of(StringParameter("A"), StringParameter("A"))

    def test_with_definition_appends(self):
        s = ParameterSet.of(StringParameter("A")).with_definition(StringParameter("B", "b"))
        assert s.names == ["A", "B"]

    def test_with_definition_replaces_in_position(self):
        s = ParameterSet.of(StringParameter("A"), StringParameter("B"), StringParameter("C"))
        updated = s.with_definition(StringParameter("B", "new"))
        assert updated.names == ["A", "B", "C"]
        assert updated.get("B") == StringParameter("B", "new")
        assert s.get("B") == StringParameter("B")

    def test_without(self):
        s = ParameterSet.of(StringParameter("A"), OpaqueParameter("B", "boolean"))
        assert s.without("A").names == ["B"]
        assert s.without("missing") == s

    def test_get_missing(self):
        assert ParameterSet().get("A") is None


def test_string_parameter_with_default_keeps_description():
    p = StringParameter("A", "old", "desc").with_default("new")
    assert p == StringParameter("A", "new", "desc")


def test_build_context_root_flag():
    assert BuildContext("a", 1).is_root
    assert not BuildContext("a", 1, upstream_cause=UpstreamCause("b", 2)).is_root
