"""
Script elements endpoint logic.
Opens an isolated browser session, loads the page, gathers the
reconciled script artifacts and closes the session again.
"""

from __future__ import annotations

from typing import Any

from scriptscope import config
from scriptscope.browser import device_configs
from scriptscope.browser.session import BrowserSession
from scriptscope.gather import assembler
from scriptscope.gather.script_elements import ScriptElementsGatherer
from scriptscope.models import scripts
from scriptscope.utils import errors, logger, url as url_mod

log = logger.create_logger("Gather")


class NavigationFailedError(errors.ScriptElementsError):
    """The page could not be loaded."""


async def gather_script_elements(
    url: str,
    device: str,
    fetch_mode: scripts.FetchMode | None = None,
    settings: config.Settings | None = None,
) -> dict[str, Any]:
    """
    Load *url* on an emulated *device* and return its script artifacts.

    The payload carries the log lines of this request alone under
    ``debugLog``.

    Raises:
        UnknownDeviceError: If *device* is not a known profile.
        NavigationFailedError: If the page failed to load.
        ConfigurationError: If the page's inline scripts cannot be attributed.
    """
    logger.clear_log_buffer()
    settings = settings or config.get_settings()
    device_configs.get_device_config(device)
    mode = fetch_mode or settings.resolve_fetch_mode(device)

    logger.start_log_file(url_mod.extract_domain(url))
    log.section(f"Gathering scripts: {url}")
    log.info("Request received", {"url": url, "device": device, "fetchMode": mode})

    session = BrowserSession()
    try:
        await session.launch_browser(device, headless=settings.headless)
        navigation = await session.navigate_to(
            url,
            wait_until=settings.wait_until,
            timeout=settings.navigation_timeout_ms,
        )
        if not navigation.success:
            raise NavigationFailedError(navigation.error_message or "Navigation failed")

        page_url = navigation.final_url or url
        result = await ScriptElementsGatherer().gather(
            session,
            session.get_network_records(),
            page_url,
            mode,
        )
        return {
            "url": page_url,
            "device": device,
            "fetchMode": result.fetch_mode,
            "mainDocument": result.main_document.model_dump(by_alias=True) if result.main_document else None,
            "scripts": assembler.to_payload(result.scripts),
            "debugLog": logger.get_log_buffer(),
        }
    finally:
        await session.close()
        logger.end_log_file()
