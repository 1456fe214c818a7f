"""Tests for manifest emission."""

from contextlib import contextmanager

import pytest

from autoservice.codegen import InMemoryCodeGenerator
from autoservice.collector import collect
from autoservice.emitter import emit, manifest_path, render_manifest
from autoservice.errors import ArtifactWriteFailure
from autoservice.model import Grouping, SourceUnit


class FailingCodeGenerator:
    """Code generator whose streams fail on write."""

    def __init__(self):
        self.opened = []

    @contextmanager
    def create_artifact(self, dependencies, path):
        self.opened.append(path)

        class _Broken:
            def write(self, text):
                raise OSError("disk full")

        yield _Broken()


class TestManifestContent:
    """Manifest bodies are sorted, deduplicated and newline-terminated."""

    def test_documented_example(self, occurrence):
        generator = InMemoryCodeGenerator()
        grouping = collect([
            occurrence("B", "I"),
            occurrence("A", "I", "J"),
        ])
        emit(grouping, generator)

        assert generator.files == {
            "META-INF/services/I": "A\nB\n",
            "META-INF/services/J": "A\n",
        }

    def test_sorted_by_code_point(self, occurrence):
        generator = InMemoryCodeGenerator()
        emit(
            collect([
                occurrence("p:beta", "p:I"),
                occurrence("p:Zeta", "p:I"),
                occurrence("p:Alpha", "p:I"),
                occurrence("p:Alpha.Inner", "p:I"),
            ]),
            generator,
        )
        # Code-point order: uppercase before lowercase
        assert generator.files["META-INF/services/p.I"] == "p.Alpha\np.Alpha$Inner\np.Zeta\np.beta\n"

    def test_duplicate_implementers_listed_once(self, occurrence):
        grouping = Grouping()
        for unit in ("a.py", "b.py"):
            collect([occurrence("p:A", "p:I", unit=unit)], grouping)
        artifacts = emit(grouping, InMemoryCodeGenerator())
        assert artifacts[0].implementers == ("p.A",)
        assert artifacts[0].content == "p.A\n"

    def test_render_manifest(self):
        assert render_manifest(["a.B", "a.C"]) == "a.B\na.C\n"
        assert render_manifest([]) == ""

    def test_manifest_path(self):
        assert manifest_path("pkg.Outer$Iface") == "META-INF/services/pkg.Outer$Iface"


class TestDependencies:
    """Each manifest declares every contributing unit, aggregating."""

    def test_dependency_set_is_distinct_and_sorted(self, occurrence):
        generator = InMemoryCodeGenerator()
        emit(
            collect([
                occurrence("b:B", "api:I", unit="b.py"),
                occurrence("a:A", "api:I", unit="a.py"),
                occurrence("a:A2", "api:I", unit="a.py"),
                occurrence("c:C", "api:Other", unit="c.py"),
            ]),
            generator,
        )

        deps = generator.dependencies["META-INF/services/api.I"]
        assert deps.aggregating is True
        assert deps.sources == (SourceUnit("a.py", "a"), SourceUnit("b.py", "b"))
        assert generator.dependencies["META-INF/services/api.Other"].sources == (
            SourceUnit("c.py", "c"),
        )

    def test_artifacts_returned_in_interface_order(self, occurrence):
        artifacts = emit(
            collect([occurrence("p:A", "p:Z", "p:M", "p:B")]), InMemoryCodeGenerator()
        )
        assert [a.interface for a in artifacts] == ["p.B", "p.M", "p.Z"]


class TestLifecycle:
    def test_grouping_cleared_after_emit(self, occurrence):
        grouping = collect([occurrence("p:A", "p:I")])
        emit(grouping, InMemoryCodeGenerator())
        assert len(grouping) == 0

    def test_second_emit_writes_nothing(self, occurrence):
        grouping = collect([occurrence("p:A", "p:I")])
        emit(grouping, InMemoryCodeGenerator())
        assert emit(grouping, InMemoryCodeGenerator()) == []

    def test_byte_identical_across_runs(self, occurrence):
        def run():
            generator = InMemoryCodeGenerator()
            emit(
                collect([
                    occurrence("p:C", "p:I", unit="c.py"),
                    occurrence("p:A", "p:I", "p:J", unit="a.py"),
                    occurrence("p:B", "p:J", unit="b.py"),
                ]),
                generator,
            )
            return generator.files, generator.dependency_index()

        assert run() == run()

    def test_write_failure_wraps_cause(self, occurrence):
        grouping = collect([occurrence("p:A", "p:I")])
        with pytest.raises(ArtifactWriteFailure) as exc:
            emit(grouping, FailingCodeGenerator())
        assert exc.value.path == "META-INF/services/p.I"
        assert isinstance(exc.value.cause, OSError)
        assert exc.value.__cause__ is exc.value.cause
        assert len(grouping) == 0

    def test_verbose_log_lines(self, occurrence):
        messages = []
        emit(collect([occurrence("p:A", "p:I")]), InMemoryCodeGenerator(), log=messages.append)
        assert messages == [
            "Working on resource file: META-INF/services/p.I",
            "New service file contents: ['p.A']",
            "Originating files: ['p.py']",
            "Wrote to: META-INF/services/p.I",
        ]
