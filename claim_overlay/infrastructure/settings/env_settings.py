"""Settings snapshot loaded from the environment and an optional .env file."""

import logging
import os
from typing import List, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from ...domain.models.settings import ExtensionSettings, ExtractionMode, TimingConfig
from ..verification.api_adapter import ApiVerificationConfig

logger = logging.getLogger(__name__)

ENV_PREFIX = "CLAIM_OVERLAY_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class AppConfig(BaseModel):
    """Everything a process needs to run page sessions."""

    provider: str = Field(default="mock", description="Verification provider name")
    api: ApiVerificationConfig = Field(default_factory=ApiVerificationConfig, description="Backend adapter config")
    extension: ExtensionSettings = Field(default_factory=ExtensionSettings, description="Settings snapshot")
    timing: TimingConfig = Field(default_factory=TimingConfig, description="Reaction delays")
    log_level: str = Field(default="INFO", description="Root log level")


def _flag(value: Optional[str], default: bool) -> bool:
    if value is None or not value.strip():
        return default
    value = value.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


def _domains(value: Optional[str]) -> List[str]:
    return [item.strip().lower() for item in (value or "").split(",") if item.strip()]


def config_from_env(env: Mapping[str, str]) -> AppConfig:
    """Build the config from CLAIM_OVERLAY_* variables.

    Raises:
        ValueError: If a variable holds an unparseable value
    """

    def get(name: str) -> Optional[str]:
        return env.get(ENV_PREFIX + name)

    api = ApiVerificationConfig()
    api_overrides = {}
    if get("BACKEND_URL"):
        api_overrides["base_url"] = get("BACKEND_URL").rstrip("/")
    if get("TIMEOUT"):
        api_overrides["timeout"] = float(get("TIMEOUT"))
    if get("CACHE_TTL"):
        api_overrides["cache_ttl"] = int(get("CACHE_TTL"))
    if api_overrides:
        api = ApiVerificationConfig(**{**api.model_dump(), **api_overrides})

    defaults = ExtensionSettings()
    extension = ExtensionSettings(
        enabled=_flag(get("ENABLED"), defaults.enabled),
        highlight_aggressiveness=ExtractionMode(get("MODE") or defaults.highlight_aggressiveness.value),
        show_tooltips=_flag(get("SHOW_TOOLTIPS"), defaults.show_tooltips),
        enabled_domains=_domains(get("ENABLED_DOMAINS")),
        disabled_domains=_domains(get("DISABLED_DOMAINS")),
    )

    return AppConfig(
        provider=(get("PROVIDER") or "mock").strip().lower(),
        api=api,
        extension=extension,
        log_level=(get("LOG_LEVEL") or "INFO").upper(),
    )


def load_config(env_file: Optional[str] = None) -> AppConfig:
    """Load .env (if present) into the environment, then read the config."""
    if load_dotenv(env_file):
        logger.info("📁 Environment variables loaded from .env file via python-dotenv")
    config = config_from_env(os.environ)
    logger.info(f"⚙️ Provider: {config.provider}, mode: {config.extension.highlight_aggressiveness.value}")
    return config
