"""Tests for the layered configuration loader."""

import pytest

from nanoreader.common import ConfigLoader
from nanoreader.extractor.config import NanoReaderConfig


@pytest.fixture
def loader(monkeypatch):
    """Loader isolated from system/user config files and the environment."""
    loader = ConfigLoader(app_name="nanoreader", config_class=NanoReaderConfig)
    monkeypatch.setattr(loader, "_load_system_config", lambda: None)
    monkeypatch.setattr(loader, "_load_user_config", lambda: None)
    return loader


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    import os
    for key in list(os.environ):
        if key.startswith("NANOREADER_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


class TestConfigLoader:
    """Tests for ConfigLoader.load."""

    def test_no_sources_uses_model_defaults(self, loader):
        config = loader.load()

        assert isinstance(config, NanoReaderConfig)
        assert config.extraction.metadata_file == "pa.bin"

    def test_defaults_file(self, loader, tmp_path):
        defaults = tmp_path / "custom.toml"
        defaults.write_text('[extraction]\noutput_dir = "out"\nmax_nesting_depth = 4\n', encoding="utf-8")

        config = loader.load(defaults_path=defaults)

        assert config.extraction.output_dir == "out"
        assert config.extraction.max_nesting_depth == 4

    def test_missing_explicit_defaults_file(self, loader, tmp_path):
        with pytest.raises(FileNotFoundError):
            loader.load(defaults_path=tmp_path / "nope.toml")

    def test_cwd_defaults_file(self, loader, tmp_path):
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "defaults.toml").write_text('[logging]\nlevel = "WARNING"\n', encoding="utf-8")

        assert loader.load().logging.level == "WARNING"

    def test_env_overrides(self, loader, monkeypatch):
        """Test NANOREADER_<SECTION>_<KEY> overrides keys containing underscores."""
        monkeypatch.setenv("NANOREADER_EXTRACTION_OUTPUT_DIR", "/env/out")
        monkeypatch.setenv("NANOREADER_EXTRACTION_MAX_NESTING_DEPTH", "7")
        monkeypatch.setenv("NANOREADER_EXTRACTION_WRITE_DEBUG_LOG", "false")

        config = loader.load()

        assert config.extraction.output_dir == "/env/out"
        assert config.extraction.max_nesting_depth == 7
        assert config.extraction.write_debug_log is False

    def test_user_config_merged_over_defaults(self, loader, monkeypatch, tmp_path):
        defaults = tmp_path / "defaults.toml"
        defaults.write_text('[extraction]\noutput_dir = "a"\ndata_file = "d.arc"\n', encoding="utf-8")
        monkeypatch.setattr(loader, "_load_user_config", lambda: {"extraction": {"output_dir": "b"}})

        config = loader.load(defaults_path=defaults)

        assert config.extraction.output_dir == "b"
        assert config.extraction.data_file == "d.arc"


class TestHelpers:
    """Tests for loader helpers."""

    def test_deep_merge(self):
        loader = ConfigLoader()
        merged = loader._deep_merge({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}, "c": 4})
        assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}

    @pytest.mark.parametrize("raw,expected", [
        ("true", True),
        ("No", False),
        ("12", 12),
        ("1.5", 1.5),
        ("pa.bin", "pa.bin"),
    ])
    def test_convert_env_value(self, raw, expected):
        assert ConfigLoader()._convert_env_value(raw) == expected

    def test_without_config_class_returns_dict(self, monkeypatch, tmp_path):
        loader = ConfigLoader(app_name="nanoreader")
        monkeypatch.setattr(loader, "_load_system_config", lambda: None)
        monkeypatch.setattr(loader, "_load_user_config", lambda: None)
        defaults = tmp_path / "d.toml"
        defaults.write_text('[extraction]\noutput_dir = "x"\n', encoding="utf-8")

        assert loader.load(defaults_path=defaults) == {"extraction": {"output_dir": "x"}}
