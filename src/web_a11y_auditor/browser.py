"""Disposable headless-browser sessions built on the Playwright async API.

The rest of the pipeline depends only on the ``Session`` and ``PageHandle``
protocols. Which browser binary and launch arguments are used is decided
inside ``launch()``, so tests can pass any coroutine returning a fake session.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol
from urllib.parse import urlsplit

from playwright.async_api import Browser, Page, Playwright, Route, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from web_a11y_auditor.config import AuditConfig
from web_a11y_auditor.exceptions import AuditBrowserError, AuditNavigationError, AuditValidationError
from web_a11y_auditor.validation import UrlValidator

logger = logging.getLogger(__name__)

ALLOWED_RESOURCE_TYPES = frozenset({"document", "script", "xhr", "fetch", "stylesheet", "font"})

LOCAL_LAUNCH_ARGS: tuple[str, ...] = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--disable-features=VizDisplayCompositor",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
    "--force-color-profile=srgb",
)

SERVERLESS_LAUNCH_ARGS: tuple[str, ...] = LOCAL_LAUNCH_ARGS + (
    "--single-process",
    "--no-zygote",
    "--memory-pressure-off",
    "--disable-extensions",
)


class PageHandle(Protocol):
    """A loaded page that can be inspected and scripted."""

    @property
    def url(self) -> str: ...

    async def title(self) -> str: ...

    async def add_script(self, url: str) -> None: ...

    async def evaluate(self, script: str, arg: Any = None) -> Any: ...


class Session(Protocol):
    """One browser process owned by a single audit."""

    async def navigate(self, url: str, timeout_ms: int) -> PageHandle: ...

    async def close(self) -> None: ...


SessionFactory = Callable[[AuditConfig], Awaitable[Session]]


def should_allow_request(resource_type: str, url: str) -> bool:
    """Decide whether an outgoing page request is let through.

    Documents, scripts, XHR/fetch, stylesheets and fonts are needed for
    rendering, contrast and semantics checks. Images are only allowed as
    inline data URIs; media and everything else is blocked.
    """
    if resource_type in ALLOWED_RESOURCE_TYPES:
        return True
    if resource_type == "image":
        return url.startswith("data:")
    return False


def launch_options(config: AuditConfig) -> dict[str, Any]:
    """Build Chromium launch options for the current deployment target."""
    args = SERVERLESS_LAUNCH_ARGS if config.browser_serverless else LOCAL_LAUNCH_ARGS
    options: dict[str, Any] = {
        "headless": config.browser_headless,
        "args": list(args),
        "timeout": config.navigation_timeout_ms,
    }
    if config.browser_executable_path:
        options["executable_path"] = config.browser_executable_path
    return options


class RequestPolicy:
    """Route handler applied to every request a page makes.

    A request must pass the resource-type filter and, for http(s) URLs, its
    host must resolve only to public addresses. Host verdicts are cached for
    the lifetime of the page so each host is resolved once.
    """

    def __init__(self, validator: UrlValidator) -> None:
        self.validator = validator
        self._verdicts: dict[str, bool] = {}

    async def allows(self, resource_type: str, url: str) -> bool:
        if not should_allow_request(resource_type, url):
            return False
        parts = urlsplit(url)
        if parts.scheme.lower() not in ("http", "https"):
            return True
        host = (parts.hostname or "").lower()
        if host not in self._verdicts:
            self._verdicts[host] = await asyncio.to_thread(self._is_public, url)
        return self._verdicts[host]

    def _is_public(self, url: str) -> bool:
        try:
            self.validator.validate(url)
        except AuditValidationError as exc:
            logger.warning("Blocked request to %s: %s", url, exc)
            return False
        return True

    async def __call__(self, route: Route) -> None:
        request = route.request
        if await self.allows(request.resource_type, request.url):
            await route.continue_()
        else:
            await route.abort()


class PlaywrightPage:
    """PageHandle backed by a Playwright page."""

    def __init__(self, page: Page) -> None:
        self._page = page

    @property
    def url(self) -> str:
        return self._page.url

    async def title(self) -> str:
        try:
            return await self._page.title()
        except PlaywrightError as exc:
            raise AuditBrowserError(f"Could not read page title: {exc}") from exc

    async def add_script(self, url: str) -> None:
        try:
            await self._page.add_script_tag(url=url)
        except PlaywrightError as exc:
            raise AuditBrowserError(f"Could not inject script {url}: {exc}") from exc

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        try:
            return await self._page.evaluate(script, arg)
        except PlaywrightError as exc:
            raise AuditBrowserError(f"Page evaluation failed: {exc}") from exc


class BrowserSession:
    """A single Chromium process. ``close()`` is idempotent."""

    def __init__(
        self,
        playwright: Playwright,
        browser: Browser,
        config: AuditConfig,
        validator: UrlValidator | None = None,
    ) -> None:
        self._playwright = playwright
        self._browser = browser
        self.config = config
        self.validator = validator or UrlValidator()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def navigate(self, url: str, timeout_ms: int) -> PlaywrightPage:
        """Open a page, load the URL and wait for client-side rendering to settle.

        Every request the page makes, subresources included, goes through
        ``RequestPolicy``. Routing only sees the first hop of a redirect, so the
        final URL is validated again once the load finishes.

        Raises:
            AuditNavigationError: On a non-success response, a timeout, or any
                other load failure.
            AuditValidationError: If a redirect landed on a non-public host.
        """
        if self._closed:
            raise AuditBrowserError("Browser session is already closed")

        try:
            page = await self._browser.new_page(
                viewport={"width": self.config.viewport_width, "height": self.config.viewport_height},
            )
            page.set_default_navigation_timeout(timeout_ms)
            page.set_default_timeout(timeout_ms)
            await page.route("**/*", RequestPolicy(self.validator))
        except PlaywrightError as exc:
            raise AuditBrowserError(f"Could not open page: {exc}") from exc

        logger.info("Navigating to %s", url)
        try:
            response = await page.goto(url, wait_until=self.config.navigation_wait_until, timeout=timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise AuditNavigationError(f"Failed to load page: timeout after {timeout_ms}ms") from exc
        except PlaywrightError as exc:
            raise AuditNavigationError(f"Failed to load page: {exc}") from exc

        if response is None:
            raise AuditNavigationError("Failed to load page: no response")
        if not response.ok:
            raise AuditNavigationError(
                f"Failed to load page: {response.status} {response.status_text}".rstrip(),
                status_code=response.status,
            )
        if page.url != url:
            logger.info("Redirected from %s to %s", url, page.url)
            await asyncio.to_thread(self.validator.validate, page.url)

        await asyncio.sleep(self.config.settle_delay_seconds)
        return PlaywrightPage(page)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._browser.close()
        except PlaywrightError as exc:
            logger.warning("Error closing browser: %s", exc)
        finally:
            await self._playwright.stop()
        logger.debug("Browser session closed")

    async def __aenter__(self) -> BrowserSession:
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.close()


async def launch(config: AuditConfig) -> BrowserSession:
    """Start Playwright and launch one headless Chromium process.

    Raises:
        AuditBrowserError: If the browser binary cannot be started.
    """
    playwright = await async_playwright().start()
    try:
        browser = await playwright.chromium.launch(**launch_options(config))
    except PlaywrightError as exc:
        await playwright.stop()
        raise AuditBrowserError(f"Failed to launch browser: {exc}") from exc
    logger.info("Launched Chromium (headless=%s, serverless=%s)", config.browser_headless, config.browser_serverless)
    return BrowserSession(playwright, browser, config)
