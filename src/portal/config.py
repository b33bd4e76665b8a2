"""Portal configuration loaded from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings


class PortalConfig(BaseSettings):
    """Portal configuration loaded from environment variables.

    Settings are loaded from environment variables with sensible defaults.
    For local development, create a .env file in the project root.
    """

    # Document store (one JSON document, all collections)
    portal_api_url: str = Field(
        default="http://localhost:3000/api/data",
        description="Whole-document endpoint: GET returns it, POST replaces it",
    )
    portal_data_file: str = Field(
        default="",
        description="Local JSON document path; overrides the HTTP store when set",
    )
    request_timeout_seconds: float = Field(
        default=15.0,
        description="Per-request timeout for the HTTP store",
    )
    max_retries: int = Field(
        default=3,
        description="Attempts for transient storage failures",
    )
    retry_wait_seconds: float = Field(
        default=1.0,
        description="Fixed wait between storage retries",
    )

    # Session settings
    state_dir: str = Field(
        default="data/state",
        description="Directory for the persisted login session",
    )
    max_session_age_hours: int = Field(
        default=24,
        description="Maximum age of a saved session before it is discarded",
    )

    # Progress
    default_days_to_complete: int = Field(
        default=30,
        description="Cycle length given to newly added students",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# Singleton pattern
_config: PortalConfig | None = None


def get_config() -> PortalConfig:
    """Get the portal configuration singleton.

    Returns:
        PortalConfig: Portal configuration instance
    """
    global _config
    if _config is None:
        _config = PortalConfig()
    return _config
