from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MacSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="mac_cli_",
        extra="ignore",
        env_file=".env",
    )

    # Mail
    download_dir: Path = Path.home() / "Downloads"  # save-attachments target when no dir is given
    default_mailbox: str = "INBOX"
    mail_search_limit: int = 20
    confirm_send: bool = True

    # Calendar
    default_calendar: str = "Calendar"
    calendar_days: int = 7
    event_duration_minutes: int = 60

    # Contacts / Notes
    contacts_list_limit: int = 50
    notes_list_limit: int = 20

    # osascript
    script_timeout_seconds: float = 60.0
    long_script_timeout_seconds: float = 120.0  # calendar ranges, reminder scans, notes search

    log_level: str = "WARNING"

    @field_validator("download_dir", mode="before")
    @classmethod
    def _expand_download_dir(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return Path.home() / "Downloads"
        return Path(value).expanduser()

    @field_validator("default_mailbox", "default_calendar", mode="before")
    @classmethod
    def _blank_to_default(cls, value: Any, info) -> Any:
        if isinstance(value, str) and not value.strip():
            return cls.model_fields[info.field_name].default
        return value

    @field_validator(
        "mail_search_limit",
        "calendar_days",
        "event_duration_minutes",
        "contacts_list_limit",
        "notes_list_limit",
    )
    @classmethod
    def _positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be a positive integer")
        return value

    @field_validator("log_level", mode="after")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper() or "WARNING"
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level
