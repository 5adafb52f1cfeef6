"""Remembered connection defaults.

The CLI falls back to these values for any option it is not given and
writes them back after every successful login.
"""

import json
from dataclasses import dataclass, asdict, fields, replace
from pathlib import Path
from typing import Optional

from src.config.paths import get_settings_path
from src.ftp.session import FTPConnectionConfig


@dataclass
class AppSettings:
    """Connection defaults stored in settings.json."""

    last_host: str = ""
    last_port: int = 21
    last_username: str = "anonymous"
    passive_mode: bool = True
    timeout: int = 10

    # Destination for mirror-down when none is given
    local_directory: str = ""

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "AppSettings":
        """Build settings from stored JSON; keys from other versions are dropped."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def with_overrides(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        active: bool = False,
        timeout: Optional[int] = None,
    ) -> "AppSettings":
        """Copy with command-line values taking precedence; None keeps the stored value."""
        return replace(
            self,
            last_host=host or self.last_host,
            last_port=port or self.last_port,
            last_username=username or self.last_username,
            passive_mode=self.passive_mode and not active,
            timeout=timeout or self.timeout,
        )

    def connection_config(self, host: Optional[str] = None) -> FTPConnectionConfig:
        """
        Build a connection configuration from these settings.

        Args:
            host: Host overriding ``last_host``

        Raises:
            ValueError: If the resulting configuration is invalid
        """
        return FTPConnectionConfig(
            host=host or self.last_host,
            port=self.last_port,
            username=self.last_username,
            passive_mode=self.passive_mode,
            timeout=self.timeout,
        )


class SettingsManager:
    """Reads and writes AppSettings as JSON."""

    def __init__(self, config_path: Optional[Path] = None):
        self._config_path = config_path or get_settings_path()
        self._settings: Optional[AppSettings] = None

    @property
    def config_path(self) -> Path:
        return self._config_path

    def load(self) -> AppSettings:
        """Load stored settings; a missing or unreadable file gives defaults."""
        try:
            data = json.loads(self._config_path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            data = {}

        self._settings = AppSettings.from_dict(data if isinstance(data, dict) else {})
        return self._settings

    def save(self, settings: AppSettings) -> None:
        self._settings = settings
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        self._config_path.write_text(json.dumps(settings.to_dict(), indent=2), encoding="utf-8")

    def reset(self) -> AppSettings:
        """Forget everything stored and return the defaults."""
        self._settings = AppSettings()
        if self._config_path.exists():
            self._config_path.unlink()
        return self._settings

    def remember(self, config: FTPConnectionConfig) -> AppSettings:
        """
        Store the parameters of a connection that logged in successfully.

        Fields not part of a connection, such as ``local_directory``,
        keep their stored value.

        Args:
            config: Configuration the session was opened with

        Returns:
            The saved settings
        """
        current = self._settings if self._settings is not None else self.load()
        settings = replace(
            current,
            last_host=config.host,
            last_port=config.port,
            last_username=config.username,
            passive_mode=config.passive_mode,
            timeout=config.timeout,
        )
        self.save(settings)
        return settings
