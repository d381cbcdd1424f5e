"""Pydantic models for browser session, navigation, and device configuration."""

from __future__ import annotations

from typing import Literal

import pydantic

HostFormFactor = Literal["mobile", "desktop"]


class NavigationResult(pydantic.BaseModel):
    """Result of a navigation attempt."""

    success: bool
    status_code: int | None
    status_text: str | None
    final_url: str | None = None
    error_message: str | None


class ViewportSize(pydantic.BaseModel):
    """Viewport dimensions for browser emulation."""

    width: int
    height: int


class DeviceConfig(pydantic.BaseModel):
    """Device configuration for browser emulation."""

    user_agent: str
    viewport: ViewportSize
    device_scale_factor: float
    is_mobile: bool
    has_touch: bool
