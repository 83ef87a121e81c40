"""Configuration management using Pydantic models."""

import logging
import os
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator

from .constants import DEFAULT_TIMEOUT_SECONDS, RetryPolicy
from .exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "ANITRACK_CONFIG"
DEFAULT_CONFIG_PATH = Path("data/config.yaml")


class BackendConfig(BaseModel):
    """Per-backend credentials."""
    access_token: str = ""


class TrackingConfig(BaseModel):
    """Tracking behaviour."""
    service: str = "anilist"
    dual_tracking: bool = False
    retry_policy: RetryPolicy = RetryPolicy.FAILED_ONLY
    log_level: str = "INFO"

    @field_validator("service", mode="before")
    @classmethod
    def ensure_service_text(cls, v):
        """Treat an unset service as empty text."""
        return "" if v is None else str(v)


class HTTPConfig(BaseModel):
    """HTTP client settings."""
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


class Config(BaseModel):
    """Root configuration model."""
    tracking: TrackingConfig = Field(default_factory=TrackingConfig)
    anilist: BackendConfig = Field(default_factory=BackendConfig)
    mal: Optional[BackendConfig] = None
    myanimelist: Optional[BackendConfig] = None
    http: HTTPConfig = Field(default_factory=HTTPConfig)


class TrackingPolicy(BaseModel):
    """The slice of configuration the tracking core reads per call."""
    service: str = "anilist"
    dual_tracking: bool = False
    retry_policy: RetryPolicy = RetryPolicy.FAILED_ONLY


class Settings:
    """Application settings loaded from config.yaml."""

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """Load and validate configuration."""
        self.config_path = Path(config_path) if config_path else self._get_config_path()
        self._load_config()

    def _get_config_path(self) -> Path:
        """Get config file path from the environment or the default location."""
        return Path(os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)

    def _load_config(self) -> None:
        """Load configuration from YAML using Pydantic."""
        raw_config = {}
        if self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    raw_config = yaml.safe_load(f) or {}
                config = Config(**raw_config)
            except (OSError, yaml.YAMLError, ValueError, TypeError) as e:
                logger.error(f"Failed to load config: {e}")
                raise ConfigError(f"failed to load {self.config_path}: {e}") from e
            logger.info(f"Loaded configuration from {self.config_path}")
        else:
            logger.debug(f"No config file at {self.config_path}, using defaults")
            config = Config()

        self.tracking_service = config.tracking.service
        self.dual_tracking = config.tracking.dual_tracking
        self.retry_policy = config.tracking.retry_policy
        self.log_level = config.tracking.log_level
        self.timeout = config.http.timeout_seconds

        # Support both "mal" and "myanimelist" keys
        mal_config = config.myanimelist or config.mal or BackendConfig()
        self.anilist_access_token = os.environ.get("ANILIST_ACCESS_TOKEN") or config.anilist.access_token
        self.mal_access_token = os.environ.get("MAL_ACCESS_TOKEN") or mal_config.access_token

    @property
    def policy(self) -> TrackingPolicy:
        return TrackingPolicy(
            service=self.tracking_service,
            dual_tracking=self.dual_tracking,
            retry_policy=self.retry_policy,
        )
