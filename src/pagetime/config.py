"""Configuration management for pagetime.

Loads configuration from environment variables and provides defaults.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()

DEFAULT_DB_PATH = Path.home() / ".pagetime" / "pagetime.db"


@dataclass
class Config:
    """Application configuration."""

    # Database
    db_path: Path

    # Timer
    tick_interval: float  # seconds between driver ticks
    auto_flush_seconds: float  # elapsed seconds before an automatic flush

    # Persistence
    persist_debounce: float  # seconds
    persist_retry_max: int
    persist_retry_delay: float  # seconds, doubled per consecutive failure

    # Logging
    log_level: str

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        db_path_str = os.environ.get("PAGETIME_DB_PATH", str(DEFAULT_DB_PATH))
        db_path = Path(db_path_str).expanduser()

        return cls(
            db_path=db_path,
            tick_interval=float(os.environ.get("PAGETIME_TICK_INTERVAL", "1.0")),
            auto_flush_seconds=float(os.environ.get("PAGETIME_AUTO_FLUSH_SECONDS", "30")),
            persist_debounce=float(os.environ.get("PAGETIME_PERSIST_DEBOUNCE", "1.0")),
            persist_retry_max=int(os.environ.get("PAGETIME_PERSIST_RETRY_MAX", "5")),
            persist_retry_delay=float(
                os.environ.get("PAGETIME_PERSIST_RETRY_DELAY", "1.0")
            ),
            log_level=os.environ.get("PAGETIME_LOG_LEVEL", "WARNING").upper(),
        )

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if self.tick_interval <= 0:
            errors.append(f"Tick interval must be positive: {self.tick_interval}")
        if self.auto_flush_seconds <= 0:
            errors.append(f"Auto-flush interval must be positive: {self.auto_flush_seconds}")
        if self.persist_debounce < 0:
            errors.append(f"Persist debounce cannot be negative: {self.persist_debounce}")
        if self.persist_retry_max < 0:
            errors.append(f"Persist retry max cannot be negative: {self.persist_retry_max}")
        if self.persist_retry_delay < 0:
            errors.append(f"Persist retry delay cannot be negative: {self.persist_retry_delay}")

        # Check database directory is writable
        if str(self.db_path) != ":memory:" and not self.db_path.parent.exists():
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            except PermissionError:
                errors.append(f"Cannot create database directory: {self.db_path.parent}")

        return errors


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the global config instance. Used for testing."""
    global _config
    _config = None
