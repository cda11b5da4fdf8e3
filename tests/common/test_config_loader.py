"""Tests for the multi-source configuration loader."""

import os

import pytest

from wsr_image.common import ConfigLoader, ConfigurationError
from wsr_image.extractor.config import WsrImageConfig


@pytest.fixture
def loader(tmp_path, monkeypatch):
    """Loader isolated from the real working directory, user config and environment."""
    monkeypatch.chdir(tmp_path)
    user_dir = tmp_path / "user-config"
    monkeypatch.setattr(
        "wsr_image.common.config.platformdirs.user_config_dir",
        lambda **kwargs: str(user_dir),
    )
    for key in list(os.environ):
        if key.startswith("WSR_IMAGE_"):
            monkeypatch.delenv(key)
    return ConfigLoader(app_name="wsr-image", config_class=WsrImageConfig)


class TestConfigLoader:
    """Tests for ConfigLoader.load()."""

    def test_no_files_gives_defaults(self, loader):
        config = loader.load()

        assert config == WsrImageConfig()

    def test_explicit_defaults_file(self, loader, tmp_path):
        defaults = tmp_path / "custom.toml"
        defaults.write_text('[extraction]\nencoding = "latin-1"\n', encoding="utf-8")

        config = loader.load(defaults_path=defaults)

        assert config.extraction.encoding == "latin-1"

    def test_working_directory_defaults(self, loader, tmp_path):
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "defaults.toml").write_text(
            "[logging]\nlevel = 'DEBUG'\n", encoding="utf-8"
        )

        assert loader.load().logging.level == "DEBUG"

    def test_user_config_overrides_defaults(self, loader, tmp_path):
        defaults = tmp_path / "defaults.toml"
        defaults.write_text("[extraction]\npreview = false\nencoding = 'ascii'\n", encoding="utf-8")
        user_dir = tmp_path / "user-config"
        user_dir.mkdir()
        (user_dir / "config.toml").write_text("[extraction]\npreview = true\n", encoding="utf-8")

        config = loader.load(defaults_path=defaults)

        assert config.extraction.preview is True
        assert config.extraction.encoding == "ascii"

    def test_environment_overrides_files(self, loader, tmp_path, monkeypatch):
        defaults = tmp_path / "defaults.toml"
        defaults.write_text("[extraction]\nverify_written_files = false\n", encoding="utf-8")
        monkeypatch.setenv("WSR_IMAGE_EXTRACTION_VERIFY_WRITTEN_FILES", "yes")
        monkeypatch.setenv("WSR_IMAGE_LOGGING_LEVEL", "error")

        config = loader.load(defaults_path=defaults)

        assert config.extraction.verify_written_files is True
        assert config.logging.level == "ERROR"

    def test_missing_explicit_file(self, loader, tmp_path):
        with pytest.raises(ConfigurationError):
            loader.load(defaults_path=tmp_path / "missing.toml")

    def test_malformed_toml(self, loader, tmp_path):
        defaults = tmp_path / "bad.toml"
        defaults.write_text("[extraction\n", encoding="utf-8")

        with pytest.raises(ConfigurationError) as exc_info:
            loader.load(defaults_path=defaults)

        assert exc_info.value.context["path"] == str(defaults)

    def test_invalid_values(self, loader, monkeypatch):
        monkeypatch.setenv("WSR_IMAGE_EXTRACTION_ENCODING_ERRORS", "shrug")

        with pytest.raises(ConfigurationError):
            loader.load()

    def test_config_property_loads_once(self, loader):
        first = loader.config
        assert loader.config is first


class TestEnvValueConversion:
    """Tests for environment value type conversion."""

    def test_booleans(self, loader):
        assert loader._convert_env_value("true") is True
        assert loader._convert_env_value("No") is False

    def test_numbers(self, loader):
        assert loader._convert_env_value("10") == 10
        assert loader._convert_env_value("2.5") == 2.5

    def test_strings(self, loader):
        assert loader._convert_env_value("utf-8") == "utf-8"

    def test_env_prefix(self, loader):
        assert loader.env_prefix == "WSR_IMAGE_"
