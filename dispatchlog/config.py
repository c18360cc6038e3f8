"""Runtime settings - env-driven, via pydantic-settings.

Reads from a ``.env`` file and ``DISPATCHLOG_*`` environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from dispatchlog.models.events import Level
from dispatchlog.models.routing import CachePolicy


class DispatchSettings(BaseSettings):
    """Process-wide defaults, overridable from the environment.

    Examples
    --------
    Override via environment::

        export DISPATCHLOG_LOG_LEVEL=DEBUG
        export DISPATCHLOG_CONFIG_PATH=/etc/myapp/logging.toml
        export DISPATCHLOG_CACHE_POLICY=first_writer_wins
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="DISPATCHLOG_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Level applied to configured loggers when a config file does not set one
    log_level: Level = Level.INFO

    # Default configuration file for the CLI
    config_path: Path = Path("dispatchlog.toml")

    # Default policy for dispatchers built from configuration
    cache_policy: CachePolicy = CachePolicy.SINGLE_FLIGHT

    # Sink layout used when a sink config gives no pattern
    default_pattern: str = "%d %5p [%t] %c: %m%n"

    # Directory exposed to configuration files as ${LOGS_DIR}
    logs_dir: Path = Path("logs")

    def substitution_variables(self) -> dict[str, str]:
        """Variables made available to ``${NAME}`` substitution."""
        return {"LOGS_DIR": str(self.logs_dir)}


# Module-level singleton - import as `from dispatchlog.config import settings`
settings = DispatchSettings()
