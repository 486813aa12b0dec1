"""Configuration for the App Store Connect API connection."""

import logging
import os
from pathlib import Path

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from ascbridge.xcode_cloud.errors import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "APP_STORE_CONNECT_"
REQUIRED_ENV_VARS = (
    "APP_STORE_CONNECT_KEY_ID",
    "APP_STORE_CONNECT_ISSUER_ID",
    "APP_STORE_CONNECT_P8_PATH",
)


class AppStoreConnectConfig(BaseSettings):
    """Credentials and connection settings for App Store Connect."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    key_id: str = Field(..., min_length=1, description="API key ID")
    issuer_id: str = Field(..., min_length=1, description="API key issuer ID")
    p8_path: Path = Field(..., description="Path to the .p8 private key file")
    vendor_number: str | None = Field(
        default=None, description="Vendor number for reports"
    )
    base_url: str = Field(
        default="https://api.appstoreconnect.apple.com/v1",
        description="App Store Connect API base URL",
    )
    request_timeout: float | None = Field(
        default=60.0,
        description="Per-request timeout in seconds (None or 0 waits forever)",
    )


def load_config(env_file: str | Path | None = ".env") -> AppStoreConnectConfig:
    """Load configuration from the environment and validate the key file.

    Args:
        env_file: Optional dotenv file read before the process environment

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If required variables are missing or the key
            file cannot be read

    """
    try:
        config = AppStoreConnectConfig(_env_file=env_file)  # type: ignore[call-arg]
    except ValidationError as e:
        missing = [name for name in REQUIRED_ENV_VARS if not os.environ.get(name)]
        detail = ", ".join(missing) if missing else str(e)
        raise ConfigurationError(
            "Missing or invalid App Store Connect configuration: "
            f"{detail}. Set APP_STORE_CONNECT_KEY_ID, "
            "APP_STORE_CONNECT_ISSUER_ID and APP_STORE_CONNECT_P8_PATH."
        ) from e

    validate_key_file(config.p8_path)
    logger.info(f"Loaded App Store Connect configuration for key {config.key_id}")
    return config


def validate_key_file(path: Path) -> None:
    """Ensure the private key file exists and is readable."""
    if not path.is_file() or not os.access(path, os.R_OK):
        raise ConfigurationError(
            f"Cannot read P8 private key file at: {path}. "
            "Set the correct path in APP_STORE_CONNECT_P8_PATH."
        )
