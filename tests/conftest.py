import asyncio
import sys
from pathlib import Path
from typing import List, Optional

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

PROJECT_ROOT = Path(__file__).resolve().parent.parent
project_root_str = str(PROJECT_ROOT)
if project_root_str not in sys.path:
    sys.path.insert(0, project_root_str)

from linkedin_profile_pkg.browser import BrowserHandle, BrowserManager  # noqa: E402
from linkedin_profile_pkg.config import ScraperSettings  # noqa: E402


class FakeContext:
    """Stands in for a Playwright BrowserContext.

    `li_at_on_call` makes a synthetic `li_at` cookie appear on the Nth call
    to `cookies()`.
    """

    def __init__(self, li_at_on_call: Optional[int] = None):
        self.added: List[dict] = []
        self.cookie_calls = 0
        self.li_at_on_call = li_at_on_call
        self.pages: List["FakePage"] = []
        self.closed = False

    async def add_cookies(self, cookies):
        self.added.extend(cookies)

    async def cookies(self):
        self.cookie_calls += 1
        jar = list(self.added)
        if self.li_at_on_call is not None and self.cookie_calls >= self.li_at_on_call:
            jar.append({
                "name": "li_at",
                "value": "synthetic-token",
                "domain": ".www.linkedin.com",
                "path": "/",
                "expires": 1893456000,
                "httpOnly": True,
                "secure": True,
                "sameSite": "None",
            })
        return jar

    async def new_page(self):
        page = FakePage(self)
        self.pages.append(page)
        return page

    async def close(self):
        self.closed = True


class FakePage:
    def __init__(self, context: Optional[FakeContext] = None, html: str = "", goto_delay: float = 0.0,
                 goto_timeout: bool = False, selector_timeout: bool = False):
        self.context = context or FakeContext()
        self.html = html
        self.goto_delay = goto_delay
        self.goto_timeout = goto_timeout
        self.selector_timeout = selector_timeout
        self.visited: List[str] = []
        self.filled = {}
        self.clicked: List[str] = []
        self.routes = []
        self.screenshots: List[str] = []
        self.screenshot_error = False
        self.closed = False
        self.navigation_timeout = None
        self.default_timeout = None

    def set_default_navigation_timeout(self, ms):
        self.navigation_timeout = ms

    def set_default_timeout(self, ms):
        self.default_timeout = ms

    async def route(self, pattern, handler):
        self.routes.append((pattern, handler))

    async def set_extra_http_headers(self, headers):
        pass

    async def goto(self, url, **kwargs):
        self.visited.append(url)
        if self.goto_delay:
            await asyncio.sleep(self.goto_delay)
        if self.goto_timeout:
            raise PlaywrightTimeoutError("Timeout exceeded")

    async def wait_for_selector(self, selector, timeout=None):
        if self.selector_timeout:
            raise PlaywrightTimeoutError("Timeout exceeded")

    async def fill(self, selector, value):
        self.filled[selector] = value

    async def click(self, selector, **kwargs):
        self.clicked.append(selector)

    async def screenshot(self, path=None, full_page=False):
        if self.screenshot_error:
            raise RuntimeError("screenshot unavailable")
        self.screenshots.append(path)

    async def content(self):
        return self.html

    async def evaluate(self, script, arg=None):
        return self.html

    async def close(self):
        self.closed = True


class FakeBrowser:
    def __init__(self):
        self.connected = True

    def is_connected(self):
        return self.connected

    async def close(self):
        self.connected = False


def make_handle(context: Optional[FakeContext] = None) -> BrowserHandle:
    return BrowserHandle(playwright=None, browser=FakeBrowser(), context=context or FakeContext())


class FakeBrowserManager(BrowserManager):
    """Hands out one scripted page and records what was released."""

    def __init__(self, settings, page):
        super().__init__(settings)
        self.page = page
        self.acquired = 0
        self.released = []

    async def acquire(self):
        self.acquired += 1
        return make_handle(self.page.context)

    async def new_page(self, handle):
        return self.page

    async def release(self, page, handle=None):
        self.released.append(page)
        await super().release(page, handle)


@pytest.fixture
def settings(tmp_path):
    return ScraperSettings(
        cookies_file=str(tmp_path / "linked_cookies.json"),
        result_file=str(tmp_path / "scrappedData.json"),
        login_screenshot_file=str(tmp_path / "login_error.png"),
        login_poll_interval_s=0,
        stealth=False,
    )
