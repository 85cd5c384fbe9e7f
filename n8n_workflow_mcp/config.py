"""Configuration management for the n8n workflow manager.

Loads configuration from environment variables (and an optional .env file)
with sensible defaults. The container name is read once at startup and then
passed explicitly to the manager.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


DEFAULT_CONTAINER_NAME = "n8n-container"


class Settings(BaseSettings):
    """n8n workflow manager configuration settings.

    All settings can be overridden via environment variables.
    Prefix: None (uses exact variable names).
    """

    # Target container
    n8n_container_name: str = Field(
        default=DEFAULT_CONTAINER_NAME,
        description="Name of the Docker container running n8n"
    )
    docker_path: str = Field(default="docker", description="Path to Docker CLI binary")

    # Logging
    mcp_log_level: str = Field(default="INFO", description="Logging level")

    # Operation tuning
    restart_wait_seconds: float = Field(
        default=10,
        ge=0,
        description="Fixed delay after a container restart before reporting success"
    )
    log_tail_lines: int = Field(
        default=20,
        gt=0,
        description="Number of container log lines fetched when troubleshooting"
    )
    command_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Timeout for a single external command in seconds (None = wait forever)"
    )

    # Paths
    backup_dir: str = Field(
        default=".",
        description="Local directory that receives workflow backups"
    )
    container_tmp_dir: str = Field(
        default="/tmp",
        description="Scratch directory inside the container"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore unknown environment variables
    }

    def get_safe_dict(self) -> dict:
        """Return config as dict for logging.

        None of the fields are secret today; keep this as the single place
        that decides what may be logged.
        """
        return self.model_dump()


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance.

    Creates the instance on first call, then returns cached version.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Force reload settings from the environment.

    Useful for testing or after environment changes.
    """
    global _settings
    _settings = None  # Clear cache
    return get_settings()
