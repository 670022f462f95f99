"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "KINDLEPDF_"
FONT_SIZES = (12, 14, 16)

REQUIRED_EMAIL_FIELDS = (
    "sender_email", "kindle_email", "smtp_host", "smtp_port", "smtp_user", "smtp_pass",
)


class Settings(BaseModel):
    author:        str = Field(default="",    description="Author name shown as the sender display name")
    sender_email:  str = Field(default="",    description="Sending address (must be approved by Amazon)")
    kindle_email:  str = Field(default="",    description="Kindle device email address")
    smtp_host:     str = Field(default="",    description="SMTP server host")
    smtp_port:     str = Field(default="587", description="SMTP port; 465 uses implicit TLS")
    smtp_user:     str = Field(default="",    description="SMTP login")
    smtp_pass:     str = Field(default="",    description="SMTP password or app password")
    font_size:     int = Field(default=14, description="Base PDF font size in px (12, 14 or 16)")
    page_break_on_hr: bool = Field(default=False, description="Insert a page break for each --- line")
    vault_dir:     str   = Field(default=".",  description="Root directory of the vault")
    render_timeout: float = Field(default=30.0, gt=0, description="Seconds before PDF rendering gives up")
    settle_delay:  float = Field(default=0.3, ge=0, description="Seconds to let images/fonts settle before printing")
    log_level:     str   = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    @field_validator("smtp_port", mode="before")
    @classmethod
    def _port_as_text(cls, v: Any) -> Any:
        # config.yaml may give the port as a bare integer
        return str(v) if isinstance(v, int) else v

    @field_validator("font_size")
    @classmethod
    def _known_font_size(cls, v: int) -> int:
        if v not in FONT_SIZES:
            raise ValueError(f"font_size must be one of {FONT_SIZES}")
        return v

    def missing_email_settings(self) -> list[str]:
        """Names of required email/SMTP fields that are empty."""
        return [name for name in REQUIRED_EMAIL_FIELDS if not str(getattr(self, name)).strip()]


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then KINDLEPDF_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
