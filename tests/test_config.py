"""
Tests for settings loading and Config resolution.
"""

import pytest

from scopy.config import (
    ScopySettings,
    build_config,
    parse_bool,
    parse_size,
)
from scopy.errors import ConfigError
from scopy.processor import DEFAULT_HEADER_FORMAT, validate_header_format


class TestParseSize:
    """Size strings."""

    @pytest.mark.parametrize("text, expected", [
        ("", 0),
        ("0", 0),
        ("100", 100),
        ("10KB", 10 * 1024),
        ("500kb", 500 * 1024),
        ("2MB", 2 * 1024 * 1024),
        ("1gb", 1024 ** 3),
    ])
    def test_valid(self, text, expected):
        assert parse_size(text) == expected

    @pytest.mark.parametrize("text", ["abc", "10 TB", "1.5MB", "KB", "-3", "+5", "1_000", "1_0KB", "\uff11\uff12"])
    def test_invalid(self, text):
        with pytest.raises(ConfigError):
            parse_size(text)


class TestHeaderFormat:
    """Header format validation."""

    def test_valid(self):
        validate_header_format("// file: %s")
        validate_header_format("/* %s */")

    @pytest.mark.parametrize("fmt", ["no placeholder", "%s and %s", "%d", "bad %"])
    def test_invalid(self, fmt):
        with pytest.raises(ConfigError):
            validate_header_format(fmt)


class TestSettings:
    """Settings file and environment overrides."""

    def test_defaults(self, tmp_path, clean_env):
        settings = ScopySettings(tmp_path / "absent.yaml")
        assert settings.config_path is None
        assert settings.header_format == DEFAULT_HEADER_FORMAT
        assert settings.exclude_patterns == [""]
        assert settings.max_size == ""
        assert not settings.strip_comments

    def test_yaml_file(self, tmp_path, clean_env):
        path = tmp_path / "scopy.yaml"
        path.write_text(
            "header_format: '# %s'\n"
            "exclude: [vendor, dist]\n"
            "max_size: 1KB\n"
            "strip_comments: true\n",
            encoding="utf-8",
        )
        settings = ScopySettings(path)
        assert settings.config_path == path
        assert settings.header_format == "# %s"
        assert settings.exclude_patterns == ["vendor", "dist"]
        assert settings.max_size == "1KB"
        assert settings.strip_comments

    def test_bad_yaml_keeps_defaults(self, tmp_path, clean_env, caplog):
        path = tmp_path / "scopy.yaml"
        path.write_text("header_format: [unclosed\n", encoding="utf-8")
        settings = ScopySettings(path)
        assert settings.config_path is None
        assert settings.header_format == DEFAULT_HEADER_FORMAT
        assert "Failed to load settings" in caplog.text

    def test_env_overrides_file(self, tmp_path, clean_env, monkeypatch):
        path = tmp_path / "scopy.yaml"
        path.write_text("exclude: vendor\n", encoding="utf-8")
        monkeypatch.setenv("SCOPY_EXCLUDE", "build,out")
        monkeypatch.setenv("SCOPY_FOLLOW_SYMLINKS", "yes")
        settings = ScopySettings(path)
        assert settings.exclude_patterns == ["build", "out"]
        assert settings.follow_symlinks
        assert settings.to_dict()["config_file"] == str(path)

    @pytest.mark.parametrize("value, expected", [
        (True, True), ("1", True), ("TRUE", True), ("on", True),
        (False, False), ("0", False), ("no", False), ("", False),
    ])
    def test_parse_bool(self, value, expected):
        assert parse_bool(value) is expected


class TestBuildConfig:
    """Merging command-line values over settings."""

    def test_cli_values_win(self, tmp_path, clean_env, monkeypatch):
        monkeypatch.setenv("SCOPY_MAX_SIZE", "1MB")
        monkeypatch.setenv("SCOPY_EXCLUDE", "vendor")
        settings = ScopySettings(tmp_path / "absent.yaml")
        config = build_config(
            settings, ["go", "js"],
            header_format="/* %s */", exclude="dist,out", max_size="2KB",
            output_to_memory=False,
        )
        assert config.header_format == "/* %s */"
        assert config.exclude_patterns == ("dist", "out")
        assert config.max_size == 2048
        assert config.extensions == ("go", "js")
        assert not config.output_to_memory

    def test_settings_fill_gaps(self, tmp_path, clean_env, monkeypatch):
        monkeypatch.setenv("SCOPY_MAX_SIZE", "1KB")
        monkeypatch.setenv("SCOPY_STRIP_COMMENTS", "true")
        config = build_config(ScopySettings(tmp_path / "absent.yaml"), ["go"])
        assert config.max_size == 1024
        assert config.strip_comments
        assert config.header_format == DEFAULT_HEADER_FORMAT

    def test_requires_extension(self, tmp_path, clean_env):
        with pytest.raises(ConfigError):
            build_config(ScopySettings(tmp_path / "absent.yaml"), [".", ""])

    def test_bad_size(self, tmp_path, clean_env):
        with pytest.raises(ConfigError, match="maximum size"):
            build_config(ScopySettings(tmp_path / "absent.yaml"), ["go"], max_size="lots")
