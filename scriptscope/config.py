"""
Runtime configuration for the script elements gatherer.

Uses ``pydantic_settings.BaseSettings`` for environment variable
binding, type coercion, and validation. The fetch mode is derived
from the emulated device's form factor unless explicitly overridden:
mobile hosts fetch script bodies one at a time.
"""

from __future__ import annotations

from typing import Literal

import pydantic
import pydantic_settings

from scriptscope.browser import device_configs
from scriptscope.models import browser, scripts
from scriptscope.utils import logger

log = logger.create_logger("Config")


class Settings(pydantic_settings.BaseSettings):
    """Gatherer settings loaded from the environment.

    Attributes:
        device: Default device profile to emulate.
        fetch_mode: Explicit fetch mode; derived from the device when unset.
        navigation_timeout_ms: Page navigation timeout.
        wait_until: Load state to wait for before gathering.
        headless: Run Chromium without a window.
        host: API bind address.
        port: API port.
    """

    device: str = pydantic.Field(default="windows-chrome", validation_alias="SCRIPTSCOPE_DEVICE")
    fetch_mode: scripts.FetchMode | None = pydantic.Field(default=None, validation_alias="SCRIPTSCOPE_FETCH_MODE")
    navigation_timeout_ms: int = pydantic.Field(default=90000, gt=0, validation_alias="SCRIPTSCOPE_NAV_TIMEOUT_MS")
    wait_until: Literal["commit", "domcontentloaded", "load", "networkidle"] = pydantic.Field(
        default="load", validation_alias="SCRIPTSCOPE_WAIT_UNTIL"
    )
    headless: bool = pydantic.Field(default=True, validation_alias="SCRIPTSCOPE_HEADLESS")
    host: str = pydantic.Field(default="0.0.0.0", validation_alias="UVICORN_HOST")
    port: int = pydantic.Field(default=3001, validation_alias="UVICORN_PORT")

    @pydantic.field_validator("fetch_mode", mode="before")
    @classmethod
    def _blank_fetch_mode(cls, value: object) -> object:
        """Treat an empty environment value as unset."""
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def resolve_fetch_mode(self, device: str | None = None) -> scripts.FetchMode:
        """Return the fetch mode for *device* (or the default device)."""
        if self.fetch_mode is not None:
            return self.fetch_mode
        return fetch_mode_for_form_factor(device_configs.form_factor_for_device(device or self.device))


def fetch_mode_for_form_factor(form_factor: browser.HostFormFactor) -> scripts.FetchMode:
    """Mobile hosts fetch in series to bound peak memory; desktops fetch in parallel."""
    return "series" if form_factor == "mobile" else "parallel"


def get_settings() -> Settings:
    """Load settings from the current environment."""
    settings = Settings()
    log.debug("Settings loaded", {"device": settings.device, "fetchMode": settings.fetch_mode, "headless": settings.headless})
    return settings
