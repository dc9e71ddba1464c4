"""Tests for configuration loading."""

import pytest

from diagram_stream.config import CONFIG_ENV_VAR, ConfigLoader, StreamConfig, default_config_path


class TestConfigLoader:
    """Test YAML configuration loading."""

    def test_defaults_without_file(self, tmp_path):
        config = ConfigLoader(tmp_path / "missing.yaml").load()
        assert config == StreamConfig()

    def test_file_overrides(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "recovery: depth\n"
            "key_path: $.meta.ref\n"
            "render_interval: 0.25\n"
            "debug: true\n"
        )

        config = ConfigLoader(path).load()

        assert config.recovery == "depth"
        assert config.key_path == "$.meta.ref"
        assert config.render_interval == 0.25
        assert config.debug is True
        assert config.log_level is None

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert ConfigLoader(path).load() == StreamConfig()

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- recovery\n- depth\n")

        with pytest.raises(ValueError, match="must contain a mapping"):
            ConfigLoader(path).load()

    def test_load_is_cached(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("recovery: depth\n")
        loader = ConfigLoader(path)

        first = loader.load()
        path.write_text("recovery: brace\n")
        assert loader.load() is first

    def test_defaults_not_shared(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("render_interval: 2\n")
        ConfigLoader(path).load()

        assert ConfigLoader.DEFAULT_CONFIG["render_interval"] == 0.0

    def test_merge_nested(self):
        loader = ConfigLoader()
        base = {"a": {"x": 1, "y": 2}, "b": 1}
        loader._merge_configs(base, {"a": {"y": 3}, "c": 4})
        assert base == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}


class TestDefaultConfigPath:
    """Test config path resolution."""

    def test_env_var(self, monkeypatch, tmp_path):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "custom.yaml"))
        assert default_config_path() == tmp_path / "custom.yaml"

    def test_home_default(self, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        assert default_config_path().parts[-3:] == (".config", "diagram-stream", "config.yaml")
