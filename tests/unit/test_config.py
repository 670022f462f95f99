"""Unit tests for config.py"""

import pytest

from kindlepdf.config import Settings, load_config


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Run from an empty directory with no KINDLEPDF_* variables set."""
    monkeypatch.chdir(tmp_path)
    for name in Settings.model_fields:
        monkeypatch.delenv(f"KINDLEPDF_{name.upper()}", raising=False)


def test_load_config_defaults():
    """Defaults apply when there is no config.yaml, env var, or override."""
    settings = load_config()
    assert settings.smtp_port == "587"
    assert settings.font_size == 14
    assert settings.page_break_on_hr is False
    assert settings.render_timeout == 30.0


def test_load_config_reads_config_yaml(tmp_path):
    """Values from config.yaml are applied; an integer port becomes text."""
    (tmp_path / "config.yaml").write_text("smtp_host: smtp.example.com\nsmtp_port: 465\nfont_size: 16\n")
    settings = load_config()
    assert settings.smtp_host == "smtp.example.com"
    assert settings.smtp_port == "465"
    assert settings.font_size == 16


def test_load_config_env_overrides_config_yaml(tmp_path, monkeypatch):
    """KINDLEPDF_SMTP_HOST takes precedence over config.yaml."""
    (tmp_path / "config.yaml").write_text("smtp_host: from-yaml\n")
    monkeypatch.setenv("KINDLEPDF_SMTP_HOST", "from-env")
    assert load_config().smtp_host == "from-env"


def test_load_config_cli_overrides_env(monkeypatch):
    """A non-None CLI override beats the env var; None overrides are ignored."""
    monkeypatch.setenv("KINDLEPDF_FONT_SIZE", "12")
    assert load_config(overrides={"font_size": 16}).font_size == 16
    assert load_config(overrides={"font_size": None}).font_size == 12


def test_load_config_env_bool(monkeypatch):
    """KINDLEPDF_PAGE_BREAK_ON_HR is coerced to bool."""
    monkeypatch.setenv("KINDLEPDF_PAGE_BREAK_ON_HR", "true")
    assert load_config().page_break_on_hr is True


def test_load_config_invalid_yaml(tmp_path):
    """load_config raises ValueError when config.yaml contains invalid YAML."""
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid config.yaml"):
        load_config()


def test_load_config_non_mapping_yaml(tmp_path):
    (tmp_path / "config.yaml").write_text("- a\n- b\n")
    with pytest.raises(ValueError, match="expected a mapping"):
        load_config()


def test_font_size_must_be_known():
    with pytest.raises(ValueError):
        Settings(font_size=13)


def test_missing_email_settings_lists_empty_fields():
    settings = Settings(sender_email="a@b.c", smtp_host="smtp", smtp_pass="  ")
    assert settings.missing_email_settings() == ["kindle_email", "smtp_user", "smtp_pass"]


def test_missing_email_settings_empty_when_complete(settings):
    assert settings.missing_email_settings() == []
