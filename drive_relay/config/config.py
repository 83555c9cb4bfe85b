"""
Centralised config for the relay server.

Settings are loaded from environment variables (and an optional ``.env`` file)
and exposed through a singleton `settings` object.
"""

import os
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_FILE = Path(__file__).resolve()


def _project_root(config_file: Path) -> Path:
    """Nearest parent holding a `.env` or `pyproject.toml`, else the directory above the package."""
    for parent in config_file.parents:
        if (parent / ".env").exists() or (parent / "pyproject.toml").exists():
            return parent
    return config_file.parents[2]


PROJECT_ROOT = _project_root(CONFIG_FILE)
ENV_FILE_PATH = PROJECT_ROOT / ".env"
PACKAGE_ROOT = CONFIG_FILE.parents[1]

DEFAULT_SCOPES = [
    "https://www.googleapis.com/auth/drive",
    "https://www.googleapis.com/auth/gmail.send",
    "https://www.googleapis.com/auth/userinfo.profile",
]


class Settings(BaseSettings):
    """
    Centralised and validated application settings.
    """
    model_config = SettingsConfigDict(
        env_file=ENV_FILE_PATH, env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # --- HTTP SERVER ---
    HOST: str = "0.0.0.0"
    PORT: int = 3010

    # --- LOCAL STATE ---
    CREDENTIALS_PATH: Path = PROJECT_ROOT / "credentials.json"
    TOKEN_PATH: Path = PROJECT_ROOT / "token.json"
    UPLOAD_DIR: Path = PROJECT_ROOT / "uploads"

    # --- OAUTH ---
    OAUTH_SCOPES: List[str] = Field(default_factory=lambda: list(DEFAULT_SCOPES))
    AUTH_REDIRECT_DELAY_SECONDS: float = 2.0
    TOKEN_REFRESH_MARGIN_SECONDS: int = 300

    # --- OUTBOUND CALLS / UPLOADS ---
    REQUEST_TIMEOUT_SECONDS: float = 30.0
    MAX_UPLOAD_BYTES: int = 100 * 1024 * 1024

    # --- LOGGING ---
    RELAY_LOG_LEVEL: str = "INFO"
    RELAY_LOG_TO_CONSOLE: bool = True

    # --- DYNAMIC FILE PATHS ---
    @property
    def log_path(self) -> Path:
        """
        Path for the main application log file.

        Falls back to a directory in the user's home when
        /var/log/drive_relay is not writable.
        """
        prod_log_dir = Path("/var/log/drive_relay")
        if prod_log_dir.exists() and os.access(prod_log_dir, os.W_OK):
            return prod_log_dir / "relay_history.log"

        fallback_dir = Path.home() / "drive_relay_logs"
        fallback_dir.mkdir(parents=True, exist_ok=True)
        return fallback_dir / "relay_history.log"

    @property
    def index_path(self) -> Path:
        """Path to the bundled upload form."""
        return PACKAGE_ROOT / "resources" / "index.html"


# Create a single, importable instance of the settings for the entire application.
settings = Settings()
