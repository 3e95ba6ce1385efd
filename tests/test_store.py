"""Tests for parameter stores."""

from pathlib import Path

import frontmatter
import pytest

from rootid.jobs.store import (
    InMemoryParameterStore,
    InMemoryStores,
    JobFileParameterStore,
    parse_parameters,
)
from rootid.models import OpaqueParameter, ParameterSet, StringParameter


@pytest.fixture
def job_file(tmp_path: Path, job_writer) -> Path:
    return job_writer(
        tmp_path,
        "app",
        downstream=["other"],
        parameters=[
            "{name: DEPLOY, type: boolean, default: false}",
            "{name: TARGET, type: choice, choices: [staging, prod], description: where}",
        ],
        body="Application build.\n\nSecond paragraph.",
    )


class TestJobFileParameterStore:
    def test_snapshot(self, job_file):
        params = JobFileParameterStore("app", job_file).snapshot()
        assert params.names == ["DEPLOY", "TARGET"]
        assert all(isinstance(p, OpaqueParameter) for p in params)

    def test_replace_all_preserves_other_content(self, job_file):
        store = JobFileParameterStore("app", job_file)
        store.replace_all(store.snapshot().with_definition(StringParameter("buildInfo.build.root", "foo-12")))

        post = frontmatter.load(job_file)
        assert post.metadata["downstream"] == ["other"]
        assert post.content.strip() == "Application build.\n\nSecond paragraph."
        assert post.metadata["parameters"] == [
            {"name": "DEPLOY", "type": "boolean", "default": False},
            {"name": "TARGET", "type": "choice", "choices": ["staging", "prod"], "description": "where"},
            {"name": "buildInfo.build.root", "type": "string", "default": "foo-12"},
        ]

    def test_unresolved_identifier_survives_round_trip(self, job_file):
        store = JobFileParameterStore("app", job_file)
        store.add(StringParameter("buildInfo.build.root", "foo-${BUILD_NUMBER}"))
        assert store.get("buildInfo.build.root") == StringParameter("buildInfo.build.root", "foo-${BUILD_NUMBER}")

    def test_delete_removes_property(self, job_file):
        store = JobFileParameterStore("app", job_file)
        store.delete()
        assert store.snapshot() is None
        assert "parameters" not in frontmatter.load(job_file).metadata
        store.delete()

    def test_job_without_parameters(self, tmp_path, job_writer):
        path = job_writer(tmp_path, "bare")
        store = JobFileParameterStore("bare", path)
        assert store.snapshot() is None
        assert store.get("anything") is None

    def test_missing_file_raises_os_error(self, tmp_path):
        store = JobFileParameterStore("gone", tmp_path / "gone.md")
        with pytest.raises(OSError):
            store.replace_all([StringParameter("A")])

    def test_string_parameters_keep_their_fields(self, tmp_path, job_writer):
        path = job_writer(
            tmp_path,
            "child",
            parameters=[
                "{name: BRANCH, type: string, default: main, trim: true}",
                "{name: NOTE}",
                "{name: PORT, type: string, default: 12}",
            ],
        )
        store = JobFileParameterStore("child", path)
        store.add(StringParameter("buildInfo.build.root", "root-1"))

        assert frontmatter.load(path).metadata["parameters"] == [
            {"name": "BRANCH", "type": "string", "default": "main", "trim": True},
            {"name": "NOTE"},
            {"name": "PORT", "type": "string", "default": 12},
            {"name": "buildInfo.build.root", "type": "string", "default": "root-1"},
        ]

    def test_changed_default_is_written_as_string(self, tmp_path, job_writer):
        path = job_writer(tmp_path, "child", parameters=["{name: PORT, type: string, default: 12, trim: true}"])
        store = JobFileParameterStore("child", path)
        store.add(store.get("PORT").with_default("13"))

        assert frontmatter.load(path).metadata["parameters"] == [
            {"name": "PORT", "type": "string", "default": "13", "trim": True},
        ]

    def test_interleaved_writers_last_write_wins(self, job_file):
        first = JobFileParameterStore("app", job_file)
        second = JobFileParameterStore("app", job_file)
        seen_by_first = first.snapshot()
        seen_by_second = second.snapshot()

        first.replace_all(seen_by_first.with_definition(StringParameter("buildInfo.build.root", "a-1")))
        first.add(StringParameter("ONLY_FIRST", "x"))
        second.replace_all(seen_by_second.with_definition(StringParameter("buildInfo.build.root", "b-2")))

        result = JobFileParameterStore("app", job_file).snapshot()
        assert result.names == ["DEPLOY", "TARGET", "buildInfo.build.root"]
        assert result.get("buildInfo.build.root") == StringParameter("buildInfo.build.root", "b-2")

    def test_write_leaves_no_temporary_file(self, job_file):
        JobFileParameterStore("app", job_file).add(StringParameter("A", "1"))
        assert list(job_file.parent.glob(".app.md.*")) == []

    def test_failed_write_keeps_job_file_intact(self, job_file, monkeypatch):
        before = job_file.read_text(encoding="utf-8")

        def failing_replace(src, dst):
            raise PermissionError("read-only filesystem")

        monkeypatch.setattr("rootid.jobs.store.os.replace", failing_replace)
        with pytest.raises(PermissionError):
            JobFileParameterStore("app", job_file).add(StringParameter("A", "1"))

        assert job_file.read_text(encoding="utf-8") == before
        assert list(job_file.parent.glob(".app.md.*")) == []


class TestInMemory:
    def test_add_and_remove(self):
        store = InMemoryParameterStore("a")
        store.add(StringParameter("A", "1"))
        store.add(StringParameter("B", "2"))
        store.add(StringParameter("A", "3"))
        assert store.snapshot() == ParameterSet.of(StringParameter("A", "3"), StringParameter("B", "2"))

        store.remove("A")
        store.remove("missing")
        assert store.snapshot().names == ["B"]

    def test_lookup_creates_on_first_use(self):
        stores = InMemoryStores({"a": ParameterSet()})
        assert stores("a").snapshot() == ParameterSet()
        assert stores("b").snapshot() is None
        assert stores("b") is stores("b")


def test_parse_parameters_rejects_non_list():
    with pytest.raises(ValueError, match="must be a list"):
        parse_parameters({"name": "A"})


def test_parse_parameters_rejects_duplicates():
    with pytest.raises(ValueError, match="duplicate"):
        parse_parameters([{"name": "A"}, {"name": "A", "type": "boolean"}])
