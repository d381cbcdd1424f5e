"""
Browser session for gathering script elements.
Each BrowserSession owns an isolated Chromium instance and a CDP session
on its page, records every network transfer of the page load, and serves
as the page driver for the gatherer (DOM evaluation and body retrieval).
"""

from __future__ import annotations

import base64
from typing import Any, Literal

from playwright import async_api

from scriptscope.browser import device_configs
from scriptscope.models import browser, network
from scriptscope.utils import errors, logger

log = logger.create_logger("BrowserSession")

# ============================================================================
# Constants
# ============================================================================

MAX_TRACKED_REQUESTS = 5000

# Name of the isolated world page functions run in.
ISOLATED_WORLD_NAME = "__scriptscope_isolated"

WaitUntil = Literal["commit", "domcontentloaded", "load", "networkidle"]


class BrowserSession:
    """
    Manages an isolated browser session for a single page load.
    """

    def __init__(self) -> None:
        """Initialise a new browser session with empty state."""
        self._playwright: async_api.Playwright | None = None
        self._browser: async_api.Browser | None = None
        self._context: async_api.BrowserContext | None = None
        self._page: async_api.Page | None = None
        self._cdp: async_api.CDPSession | None = None

        self._network_records: list[network.NetworkRecord] = []
        # request id -> index into _network_records
        self._record_index: dict[str, int] = {}

    # ==========================================================================
    # State Getters
    # ==========================================================================

    def get_network_records(self) -> list[network.NetworkRecord]:
        """Return every transfer captured so far, in observation order."""
        return list(self._network_records)

    def clear_network_records(self) -> None:
        """Forget all captured transfers."""
        self._network_records.clear()
        self._record_index.clear()

    def _require_page(self) -> async_api.Page:
        if not self._page:
            raise errors.BrowserSessionError("No browser session active")
        return self._page

    # ==========================================================================
    # Browser Lifecycle
    # ==========================================================================

    async def launch_browser(self, device_type: str = "windows-chrome", headless: bool = True) -> None:
        """Launch Chromium with device emulation and start network capture."""
        device_config = device_configs.get_device_config(device_type)
        log.info("Launching browser", {"deviceType": device_type, "headless": headless})

        await self.close()

        self._playwright = await async_api.async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=headless)
        self._context = await self._browser.new_context(
            viewport={"width": device_config.viewport.width, "height": device_config.viewport.height},
            user_agent=device_config.user_agent,
            device_scale_factor=device_config.device_scale_factor,
            is_mobile=device_config.is_mobile,
            has_touch=device_config.has_touch,
            java_script_enabled=True,
        )
        self._page = await self._context.new_page()

        self._cdp = await self._context.new_cdp_session(self._page)
        self._cdp.on("Network.requestWillBeSent", self._on_request_will_be_sent)
        self._cdp.on("Network.responseReceived", self._on_response_received)
        self._cdp.on("Network.loadingFailed", self._on_loading_failed)
        await self._cdp.send("Network.enable")

        log.debug("Browser launched", {
            "viewport": f"{device_config.viewport.width}x{device_config.viewport.height}",
            "isMobile": device_config.is_mobile,
        })

    # ==========================================================================
    # Network Capture
    # ==========================================================================

    def _on_request_will_be_sent(self, params: dict[str, Any]) -> None:
        """Record a new transfer, or follow a redirect of an existing one."""
        request_id = params["requestId"]
        request_url = params["request"]["url"]

        # Redirects reuse the request id; keep the final URL.
        existing = self._record_index.get(request_id)
        if existing is not None:
            self._network_records[existing].url = request_url
            return

        if len(self._network_records) >= MAX_TRACKED_REQUESTS:
            if len(self._network_records) == MAX_TRACKED_REQUESTS:
                log.debug("Network request tracking limit reached", {"limit": MAX_TRACKED_REQUESTS})
            return

        self._record_index[request_id] = len(self._network_records)
        self._network_records.append(
            network.NetworkRecord(
                request_id=request_id,
                url=request_url,
                resource_type=params.get("type", "Other"),
                frame_id=params.get("frameId"),
                start_time=params.get("timestamp", 0.0),
            )
        )

    def _on_response_received(self, params: dict[str, Any]) -> None:
        """Attach status, MIME type and cache origin to a recorded transfer."""
        idx = self._record_index.get(params["requestId"])
        if idx is None:
            return
        response = params.get("response", {})
        record = self._network_records[idx]
        record.status_code = response.get("status")
        record.mime_type = response.get("mimeType")
        record.from_cache = bool(response.get("fromDiskCache") or response.get("fromMemoryCache"))
        if params.get("type"):
            record.resource_type = params["type"]

    def _on_loading_failed(self, params: dict[str, Any]) -> None:
        """Mark a recorded transfer as failed."""
        idx = self._record_index.get(params["requestId"])
        if idx is not None:
            self._network_records[idx].failed = True

    # ==========================================================================
    # Navigation
    # ==========================================================================

    async def navigate_to(
        self,
        url: str,
        wait_until: WaitUntil = "load",
        timeout: int = 90000,
    ) -> browser.NavigationResult:
        """Navigate the page to a URL and wait for it to load."""
        page = self._require_page()

        log.debug("Navigating", {"url": url, "waitUntil": wait_until, "timeout": timeout})
        try:
            response = await page.goto(url, wait_until=wait_until, timeout=timeout)
        except async_api.Error as error:
            log.warn("Navigation error", {"url": url, "error": errors.get_error_message(error)})
            return browser.NavigationResult(
                success=False,
                status_code=None,
                status_text=None,
                error_message=errors.get_error_message(error),
            )

        status_code = response.status if response else None
        status_text = response.status_text if response else None
        final_url = page.url
        if final_url != url:
            log.info("Redirected", {"from": url, "to": final_url})

        if status_code and status_code >= 400:
            return browser.NavigationResult(
                success=False,
                status_code=status_code,
                status_text=status_text,
                final_url=final_url,
                error_message=f"Server error ({status_code}: {status_text})",
            )
        return browser.NavigationResult(
            success=True,
            status_code=status_code,
            status_text=status_text,
            final_url=final_url,
            error_message=None,
        )

    # ==========================================================================
    # Page Driver
    # ==========================================================================

    def _require_cdp(self) -> async_api.CDPSession:
        if not self._cdp:
            raise errors.BrowserSessionError("No CDP session active")
        return self._cdp

    async def evaluate(self, expression: str) -> Any:
        """Evaluate a JavaScript expression in an isolated world of the main frame.

        The isolated world shares the DOM with the page but not its
        JavaScript globals, so page scripts that patch built-ins such as
        ``Element.prototype.matches`` cannot alter the result.

        Raises:
            PageEvaluationError: If the expression throws.
        """
        cdp = self._require_cdp()
        frame_tree = await cdp.send("Page.getFrameTree")
        world = await cdp.send(
            "Page.createIsolatedWorld",
            {"frameId": frame_tree["frameTree"]["frame"]["id"], "worldName": ISOLATED_WORLD_NAME},
        )
        result = await cdp.send(
            "Runtime.evaluate",
            {
                "expression": expression,
                "contextId": world["executionContextId"],
                "returnByValue": True,
                "awaitPromise": True,
            },
        )
        details = result.get("exceptionDetails")
        if details:
            description = details.get("exception", {}).get("description") or details.get("text", "")
            raise errors.PageEvaluationError(f"Page evaluation failed: {description}")
        return result.get("result", {}).get("value")

    async def get_request_content(self, request_id: str) -> str:
        """Return the response body of a captured transfer.

        Raises whatever CDP raises when the body is no longer
        available (evicted, never received, or a redirect).
        """
        result = await self._require_cdp().send("Network.getResponseBody", {"requestId": request_id})
        body = result.get("body", "")
        if result.get("base64Encoded"):
            return base64.b64decode(body).decode("utf-8", errors="replace")
        return body

    # ==========================================================================
    # Cleanup
    # ==========================================================================

    async def close(self) -> None:
        """Close the browser and clean up all resources."""
        if self._cdp:
            try:
                await self._cdp.detach()
            except async_api.Error as exc:
                log.debug("CDP detach error (non-fatal)", {"error": str(exc)})
            self._cdp = None
        self._page = None

        if self._context:
            try:
                await self._context.close()
            except async_api.Error as exc:
                log.debug("Context close error (non-fatal)", {"error": str(exc)})
            self._context = None

        if self._browser:
            try:
                await self._browser.close()
            except async_api.Error as exc:
                log.debug("Browser close error (non-fatal)", {"error": str(exc)})
            self._browser = None

        if self._playwright:
            try:
                await self._playwright.stop()
            except async_api.Error as exc:
                log.debug("Playwright stop error (non-fatal)", {"error": str(exc)})
            self._playwright = None

        self.clear_network_records()
