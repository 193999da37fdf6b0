"""Tests for path utilities."""

from pathlib import Path

from nanoreader.common import normalize_path, relative_to_root


class TestNormalizePath:
    """Tests for normalize_path function."""

    def test_forward_slashes(self):
        """Test that backslashes are converted to forward slashes."""
        result = normalize_path(r"pa\chara\model.par")
        assert result == "pa/chara/model.par"

    def test_unicode_normalization(self):
        """Test Unicode NFC normalization."""
        decomposed = "cafe\u0301.bin"
        assert normalize_path(decomposed) == "caf\u00e9.bin"

    def test_relative_path(self):
        assert normalize_path(Path("sound/bgm/title.bin")) == "sound/bgm/title.bin"


class TestRelativeToRoot:
    """Tests for relative_to_root function."""

    def test_path_under_root(self, tmp_path):
        assert relative_to_root(tmp_path / "a" / "b.bin", tmp_path) == "a/b.bin"

    def test_relative_root(self, tmp_path, monkeypatch):
        """Test relative roots resolve against the working directory."""
        monkeypatch.chdir(tmp_path)
        assert relative_to_root(Path("pa") / "x.bin", Path("pa")) == "x.bin"

    def test_path_outside_root(self, tmp_path):
        other = tmp_path / "elsewhere" / "c.bin"
        result = relative_to_root(other, tmp_path / "root")
        assert result == normalize_path(other)
