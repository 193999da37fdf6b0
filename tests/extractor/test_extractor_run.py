"""End-to-end tests for NanoExtractor runs against files on disk."""

import pytest

from nanoreader.extractor.errors import CorruptHeaderError, MissingInputError, StructuralMismatchError
from nanoreader.extractor.extractor import NanoExtractor, check_inputs
from builders import build_pa, build_par, gz


@pytest.fixture
def workdir(tmp_path):
    """Directory holding pa.bin / pa.arc for a run."""
    return tmp_path


def write_pair(workdir, entries, **kwargs):
    metadata, data = build_pa(entries, **kwargs)
    (workdir / "pa.bin").write_bytes(metadata)
    (workdir / "pa.arc").write_bytes(data)


def make_extractor(workdir, **kwargs):
    return NanoExtractor(
        metadata_file=workdir / "pa.bin",
        data_file=workdir / "pa.arc",
        output_dir=workdir / "pa",
        **kwargs,
    )


class TestCheckInputs:
    """Tests for the missing-input precondition."""

    def test_both_present(self, workdir):
        write_pair(workdir, [])
        check_inputs(workdir / "pa.bin", workdir / "pa.arc")

    def test_missing_metadata(self, workdir):
        (workdir / "pa.arc").write_bytes(b"")
        with pytest.raises(MissingInputError) as exc_info:
            check_inputs(workdir / "pa.bin", workdir / "pa.arc")
        assert exc_info.value.context["kind"] == "metadata"

    def test_missing_data(self, workdir):
        (workdir / "pa.bin").write_bytes(b"")
        with pytest.raises(MissingInputError) as exc_info:
            check_inputs(workdir / "pa.bin", workdir / "pa.arc")
        assert exc_info.value.context["kind"] == "data"


class TestNanoExtractorRun:
    """Tests for NanoExtractor.run."""

    def test_full_run(self, workdir):
        """Test outer entries, compressed PARs and nested PARs in one run."""
        nested = build_par([b"deepest"], names=["leaf.txt"])
        par = build_par(
            [b"sub one", gz(nested)],
            names=["sub.bin", "nested.par.gz"],
        )
        write_pair(workdir, [
            ("readme.txt", b"hello"),
            ("pack/model.par.gz", gz(par)),
            ("sound/bgm.gz", gz(b"ogg data")),
        ])

        result = make_extractor(workdir).run()

        assert result.succeeded
        out = workdir / "pa"
        assert (out / "readme.txt").read_bytes() == b"hello"
        assert (out / "sound" / "bgm.gz").read_bytes() == b"ogg data"
        assert (out / "pack" / "model" / "sub.bin").read_bytes() == b"sub one"
        assert (out / "pack" / "model" / "nested" / "leaf.txt").read_bytes() == b"deepest"

        assert result.manifest.to_dict() == {
            "outer": {
                "1": {"path": "readme.txt", "is_compressed": False},
                "2": {"path": "pack/model.par", "is_compressed": False},
                "3": {"path": "sound/bgm.gz", "is_compressed": False},
            },
            "inner": {
                "1": {"path": "pack/model/sub.bin", "is_compressed": False},
                "2": {"path": "pack/model/nested.par", "is_compressed": False},
                "3": {"path": "pack/model/nested/leaf.txt", "is_compressed": False},
            },
        }
        assert [e.path for e in result.extracted] == ["readme.txt", "pack/model.par", "sound/bgm.gz"]

    def test_corrupt_magic_aborts(self, workdir):
        """Test a bad header leaves no files and an empty manifest."""
        write_pair(workdir, [("a.bin", b"A")], magic=0x41414141)

        result = make_extractor(workdir).run()

        assert not result.succeeded
        assert isinstance(result.error, CorruptHeaderError)
        assert result.manifest.is_empty()
        assert not (workdir / "pa").exists()

    def test_structural_mismatch_aborts(self, workdir):
        metadata, data = build_pa([("a.bin", b"A"), ("b.bin", b"B")], entry_count=3)
        (workdir / "pa.bin").write_bytes(metadata[:32 + 2 * 16 + 2 * 4])
        (workdir / "pa.arc").write_bytes(data)

        result = make_extractor(workdir).run()

        assert isinstance(result.error, StructuralMismatchError)
        assert result.manifest.is_empty()

    def test_missing_input_aborts(self, workdir):
        result = make_extractor(workdir).run()

        assert isinstance(result.error, MissingInputError)
        assert not (workdir / "pa").exists()

    def test_bad_inner_archive_keeps_outer_files(self, workdir):
        """Test an archive-level PAR failure leaves the outer pass intact."""
        write_pair(workdir, [
            ("empty.par", build_par([b"x"], entry_count=0)),
            ("other.bin", b"other"),
        ])

        result = make_extractor(workdir).run()

        assert result.succeeded
        assert len(result.manifest.outer) == 2
        assert len(result.manifest.inner) == 0
        assert (workdir / "pa" / "other.bin").read_bytes() == b"other"

    def test_entry_failures_do_not_fail_run(self, workdir):
        """Test skipped entries and broken gzip are logged with context, not raised."""
        write_pair(workdir, [
            ("", b"nameless"),
            ("../escape.bin", b"bad"),
            ("broken.dat.gz", b"\x1f\x8b" + b"\x00" * 8),
            ("good.bin", b"good"),
        ])

        result = make_extractor(workdir).run()

        assert result.succeeded
        assert result.manifest.to_dict()["outer"] == {
            "1": {"path": "broken.dat.gz", "is_compressed": True},
            "2": {"path": "good.bin", "is_compressed": False},
        }
        assert not (workdir / "escape.bin").exists()

    def test_nesting_depth_limit(self, workdir):
        inner = build_par([b"leaf"], names=["leaf.bin"])
        middle = build_par([inner], names=["inner.par"])
        write_pair(workdir, [("outer.par", build_par([middle], names=["middle.par"]))])

        result = make_extractor(workdir, max_nesting_depth=2).run()

        paths = [e.path for e in result.manifest.inner.entries.values()]
        assert paths == ["outer/middle.par", "outer/middle/inner.par"]
