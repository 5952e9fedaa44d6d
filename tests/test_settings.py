"""
Settings loader tests.
"""

import pytest

from chunkreader.utils import ReaderSettings, load_settings
from chunkreader.utils.settings import DEFAULT_PASSAGES_DIR, PROJECT_ROOT


class TestLoadSettings:
    """Test YAML loading and environment overrides."""

    def test_missing_file_gives_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "absent.yaml", env={})
        assert settings == ReaderSettings()
        assert settings.passages_dir == DEFAULT_PASSAGES_DIR
        assert settings.require_selection_for_chunk_mode is True

    def test_yaml_values(self, tmp_path):
        config = tmp_path / "reader.yaml"
        config.write_text(
            f"passages_dir: {tmp_path}\n"
            "source_format: csv\n"
            "theme: sky\n"
            "require_selection_for_chunk_mode: false\n"
            "log_level: debug\n",
            encoding="utf-8",
        )
        settings = load_settings(config, env={})
        assert settings.passages_dir == tmp_path
        assert settings.source_format == "csv"
        assert settings.theme == "sky"
        assert settings.require_selection_for_chunk_mode is False
        assert settings.log_level == "DEBUG"

    def test_relative_dir_resolved_against_project_root(self, tmp_path):
        config = tmp_path / "reader.yaml"
        config.write_text("passages_dir: data/other\n", encoding="utf-8")
        settings = load_settings(config, env={})
        assert settings.passages_dir == PROJECT_ROOT / "data" / "other"

    def test_env_overrides_yaml(self, tmp_path):
        config = tmp_path / "reader.yaml"
        config.write_text("theme: pink\nsource_format: json\n", encoding="utf-8")
        settings = load_settings(config, env={
            "CHUNKREADER_THEME": "black",
            "CHUNKREADER_SOURCE_FORMAT": "csv",
            "CHUNKREADER_REQUIRE_SELECTION": "false",
        })
        assert settings.theme == "black"
        assert settings.source_format == "csv"
        assert settings.require_selection_for_chunk_mode is False

    def test_empty_yaml(self, tmp_path):
        config = tmp_path / "reader.yaml"
        config.write_text("", encoding="utf-8")
        assert load_settings(config, env={}) == ReaderSettings()

    def test_invalid_theme(self, tmp_path):
        with pytest.raises(ValueError):
            load_settings(tmp_path / "absent.yaml", env={"CHUNKREADER_THEME": "purple"})

    def test_invalid_source_format(self, tmp_path):
        config = tmp_path / "reader.yaml"
        config.write_text("source_format: xml\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_settings(config, env={})

    def test_yaml_not_a_mapping(self, tmp_path):
        config = tmp_path / "reader.yaml"
        config.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_settings(config, env={})

    def test_malformed_yaml(self, tmp_path):
        config = tmp_path / "reader.yaml"
        config.write_text("theme: [unclosed\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_settings(config, env={})

    def test_project_config_loads(self):
        settings = load_settings(env={})
        assert settings.source_format in ("json", "csv")
