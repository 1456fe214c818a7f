"""Tests for the artifact stores."""

import pytest

from autoservice.codegen import FileSystemCodeGenerator, InMemoryCodeGenerator
from autoservice.model import Dependencies, SourceUnit

DEPS = Dependencies(aggregating=True, sources=(SourceUnit("a.py", "a"), SourceUnit("b.py", "b")))


class TestFileSystemCodeGenerator:
    def test_writes_under_output_root(self, tmp_path):
        generator = FileSystemCodeGenerator(tmp_path / "out")
        with generator.create_artifact(DEPS, "META-INF/services/api.I") as f:
            f.write("a.A\n")

        target = tmp_path / "out" / "META-INF" / "services" / "api.I"
        assert target.read_bytes() == b"a.A\n"
        assert not target.with_name("api.I.tmp").exists()

    def test_records_dependency_index(self, tmp_path):
        generator = FileSystemCodeGenerator(tmp_path)
        with generator.create_artifact(DEPS, "META-INF/services/api.I") as f:
            f.write("a.A\n")

        assert generator.dependency_index() == {
            "META-INF/services/api.I": {"aggregating": True, "sources": ["a.py", "b.py"]},
        }

    def test_failed_write_leaves_previous_content(self, tmp_path):
        generator = FileSystemCodeGenerator(tmp_path)
        with generator.create_artifact(DEPS, "META-INF/services/api.I") as f:
            f.write("old.Impl\n")

        with pytest.raises(OSError):
            with generator.create_artifact(DEPS, "META-INF/services/api.I") as f:
                f.write("new.Part")
                raise OSError("disk full")

        target = tmp_path / "META-INF" / "services" / "api.I"
        assert target.read_text() == "old.Impl\n"
        assert not target.with_name("api.I.tmp").exists()

    def test_failed_first_write_leaves_nothing(self, tmp_path):
        generator = FileSystemCodeGenerator(tmp_path)
        with pytest.raises(OSError):
            with generator.create_artifact(DEPS, "META-INF/services/api.I") as f:
                raise OSError("disk full")

        assert list((tmp_path / "META-INF" / "services").iterdir()) == []
        assert generator.dependency_index() == {}

    def test_path_escaping_root_rejected(self, tmp_path):
        generator = FileSystemCodeGenerator(tmp_path / "out")
        with pytest.raises(OSError):
            with generator.create_artifact(DEPS, "../outside"):
                pass
        assert not (tmp_path / "outside").exists()

    def test_remove_obsolete(self, tmp_path):
        services = tmp_path / "META-INF" / "services"
        services.mkdir(parents=True)
        (services / "api.Gone").write_text("x.Y\n")

        generator = FileSystemCodeGenerator(tmp_path)
        with generator.create_artifact(DEPS, "META-INF/services/api.Kept") as f:
            f.write("a.A\n")

        removed = generator.remove_obsolete({
            "META-INF/services/api.Gone": {},
            "META-INF/services/api.Kept": {},
            "META-INF/services/api.AlreadyDeleted": {},
        })

        assert removed == ["META-INF/services/api.Gone"]
        assert not (services / "api.Gone").exists()
        assert (services / "api.Kept").exists()


class TestInMemoryCodeGenerator:
    def test_keeps_exact_text(self):
        generator = InMemoryCodeGenerator()
        with generator.create_artifact(DEPS, "META-INF/services/api.I") as f:
            f.write("a.A\n")
            f.write("b.B\n")
        assert generator.files == {"META-INF/services/api.I": "a.A\nb.B\n"}
        assert generator.dependencies["META-INF/services/api.I"] is DEPS
