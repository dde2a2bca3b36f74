import asyncio
import enum
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright, Route
from playwright.async_api import async_playwright

from .config import MOBILE_DEVICE, ScraperSettings, random_user_agent
from .errors import ResourceError
from .scraper_logging import get_logger

logger = get_logger("browser")

# Requests of these types are aborted when resource blocking is on.
BLOCKED_RESOURCE_TYPES = frozenset(["image", "stylesheet", "font", "media"])

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-blink-features=AutomationControlled",
    "--disable-extensions",
    "--disable-gpu",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
    "--disable-features=TranslateUI",
    "--disable-ipc-flooding-protection",
    "--no-first-run",
]

STEALTH_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3, 4, 5] });
Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });
window.chrome = { runtime: {} };

const originalQuery = window.navigator.permissions.query;
window.navigator.permissions.query = (parameters) => (
  parameters.name === 'notifications'
    ? Promise.resolve({ state: Notification.permission })
    : originalQuery(parameters)
);
"""


class BrowserState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    FAILED = "failed"


@dataclass
class BrowserHandle:
    """A launched browser plus the context its pages are opened in."""
    playwright: Optional[Playwright]
    browser: Browser
    context: BrowserContext

    def is_alive(self) -> bool:
        try:
            return self.browser.is_connected()
        except Exception:
            return False

    async def close(self) -> None:
        for closer in (self.context.close, self.browser.close):
            try:
                await closer()
            except Exception as e:
                logger.debug("Ignoring close error: %s", e)
        if self.playwright is not None:
            try:
                await self.playwright.stop()
            except Exception as e:
                logger.debug("Ignoring playwright stop error: %s", e)


async def new_context(playwright: Playwright, browser: Browser, settings: ScraperSettings) -> BrowserContext:
    """Create a browser context with realistic locale and header settings.

    Mobile emulation swaps the desktop viewport and UA for a device profile.
    """
    if settings.mobile:
        device = dict(playwright.devices[MOBILE_DEVICE])
        device.pop("default_browser_type", None)
        context = await browser.new_context(**device, locale="en-US")
    else:
        context = await browser.new_context(
            user_agent=random_user_agent(),
            viewport={"width": 1920, "height": 1080},
            locale="en-US",
            extra_http_headers={"Accept-Language": "en-US,en;q=0.9"},
        )
    if settings.stealth:
        await apply_stealth(context)
    return context


async def apply_stealth(context: BrowserContext) -> None:
    """Inject a lightweight init script that hides common automation signals."""
    await context.add_init_script(STEALTH_SCRIPT)


async def launch_browser(settings: ScraperSettings) -> BrowserHandle:
    """Start Playwright, launch Chromium and open a context for it."""
    playwright = await async_playwright().start()
    try:
        browser = await playwright.chromium.launch(
            headless=settings.headless,
            executable_path=settings.executable_path,
            slow_mo=settings.slow_mo_ms if settings.slow_mo_ms > 0 else None,
            args=LAUNCH_ARGS,
        )
        context = await new_context(playwright, browser, settings)
    except BaseException:
        # Cancellation included: the driver process must not outlive the launch.
        await playwright.stop()
        raise
    return BrowserHandle(playwright=playwright, browser=browser, context=context)


async def block_heavy_resources(route: Route) -> None:
    if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
        await route.abort()
    else:
        await route.continue_()


Launcher = Callable[[ScraperSettings], Awaitable[BrowserHandle]]


class BrowserManager:
    """Owns the browser lifecycle for the service.

    Two policies are supported:

    - ``shared``: the browser is launched lazily on first use, cached, and
      only closed by :meth:`close` at shutdown. Concurrent first callers share
      one in-flight launch.
    - ``ephemeral``: every :meth:`acquire` launches a fresh browser which is
      closed again by :meth:`release`.
    """

    def __init__(self, settings: ScraperSettings, launcher: Optional[Launcher] = None):
        self.settings = settings
        self._launcher = launcher or launch_browser
        self._handle: Optional[BrowserHandle] = None
        self._lock = asyncio.Lock()
        self.state = BrowserState.UNINITIALIZED

    @property
    def shared(self) -> bool:
        return self.settings.shared_browser

    async def acquire(self) -> BrowserHandle:
        if not self.shared:
            return await self._launch_with_retries()

        if self._handle is not None and self._handle.is_alive():
            return self._handle
        async with self._lock:
            # Another caller may have finished the launch while we waited.
            if self._handle is not None and self._handle.is_alive():
                return self._handle
            if self._handle is not None:
                logger.warning("Shared browser is no longer connected; relaunching")
                await self._handle.close()
                self._handle = None
            try:
                self._handle = await self._launch_with_retries()
            except ResourceError:
                self.state = BrowserState.FAILED
                raise
            self.state = BrowserState.READY
            return self._handle

    async def _launch_with_retries(self) -> BrowserHandle:
        attempts = max(1, self.settings.launch_retries)
        last_err: Exception | None = None
        for attempt in range(1, attempts + 1):
            try:
                logger.info("Launching browser (attempt %d/%d)", attempt, attempts)
                return await self._launcher(self.settings)
            except Exception as e:
                last_err = e
                logger.warning("Browser launch attempt %d failed: %s", attempt, e)
        raise ResourceError(f"Browser launch failed after {attempts} attempts: {last_err}", reason="launchFailed")

    async def new_page(self, handle: BrowserHandle) -> Page:
        """Open a page with default timeouts and optional resource blocking."""
        try:
            page = await handle.context.new_page()
            page.set_default_navigation_timeout(self.settings.navigation_timeout_ms)
            page.set_default_timeout(self.settings.default_timeout_ms)
            if self.settings.block_resources:
                await page.route("**/*", block_heavy_resources)
        except Exception as e:
            raise ResourceError(f"Could not open a browser page: {e}", reason="pageFailed") from e
        return page

    async def release(self, page: Optional[Page], handle: Optional[BrowserHandle] = None) -> None:
        """Close the page, and under the ephemeral policy its browser too."""
        if page is not None:
            try:
                await page.close()
            except Exception as e:
                logger.debug("Ignoring page close error: %s", e)
        if handle is not None and not self.shared:
            await handle.close()

    async def close(self) -> None:
        async with self._lock:
            if self._handle is not None:
                logger.info("Closing shared browser")
                await self._handle.close()
                self._handle = None
            self.state = BrowserState.UNINITIALIZED
