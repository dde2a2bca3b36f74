import asyncio
import enum
from typing import List, Optional

from playwright.async_api import Page

from .config import ScraperSettings
from .cookies_auth import CookieStore, apply_cookies, direct_session_cookie, has_session_cookie
from .errors import AuthenticationError, ScraperError
from .login import LoginFlow
from .models import SessionCookie
from .scraper_logging import get_logger

logger = get_logger("session")


class SessionStrategy(enum.Enum):
    DIRECT_COOKIE = "directCookie"
    FILE_COOKIE = "fileCookie"
    LIVE_LOGIN = "liveLogin"


class SessionState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    FAILED = "failed"


class SessionManager:
    """Resolves an authenticated session and applies it to a page.

    Resolution order, first match wins:

    1. a `li_at` value supplied directly through configuration,
    2. the cookie set persisted in the cookie store,
    3. a live login performed on the caller's own page, so the page is
       already authenticated for the scrape that triggered it.

    With `persistent=True` (shared browser context) the first successful
    resolution is remembered for the process and later calls are no-ops.
    A failed resolution leaves the manager retryable.
    """

    def __init__(
        self,
        settings: ScraperSettings,
        cookie_store: Optional[CookieStore] = None,
        persistent: bool = True,
    ):
        self.settings = settings
        self.cookie_store = cookie_store or CookieStore(settings.cookies_file)
        self.persistent = persistent
        self.state = SessionState.UNINITIALIZED
        self.strategy: Optional[SessionStrategy] = None
        self._lock = asyncio.Lock()

    @property
    def ready(self) -> bool:
        return self.persistent and self.state is SessionState.READY

    def new_login_flow(self) -> LoginFlow:
        return LoginFlow(self.settings, self.cookie_store)

    async def ensure_session(self, page: Page) -> SessionStrategy:
        if not self.persistent:
            # Every page lives in its own browser; nothing to share.
            return await self._establish(page)
        if self.ready:
            return self.strategy
        async with self._lock:
            if self.ready:
                return self.strategy
            return await self._establish(page)

    async def _establish(self, page: Page) -> SessionStrategy:
        try:
            strategy = await self._resolve(page)
        except AuthenticationError:
            self.state = SessionState.FAILED
            raise
        self.strategy = strategy
        self.state = SessionState.READY
        return strategy

    async def _resolve(self, page: Page) -> SessionStrategy:
        if self.settings.li_at_cookie:
            logger.info("Using li_at cookie from environment variable")
            await apply_cookies(page, [direct_session_cookie(self.settings.li_at_cookie)])
            return SessionStrategy.DIRECT_COOKIE

        if self.cookie_store.exists():
            # An existing cookie file is authoritative; it never triggers a login.
            cookies: List[SessionCookie] = self.cookie_store.load()
            if not cookies:
                raise AuthenticationError(
                    f"Cookie file {self.cookie_store.path} has no usable cookies. "
                    "Delete it to log in again, or replace it.",
                    reason="invalidCookieFile",
                )
            if not has_session_cookie(cookies):
                logger.warning("Cookie file %s has no li_at cookie", self.cookie_store.path)
            await apply_cookies(page, cookies)
            logger.info("Applied %d cookies from %s", len(cookies), self.cookie_store.path)
            return SessionStrategy.FILE_COOKIE

        logger.info("No cookies found, performing login with current browser page")
        flow = self.new_login_flow()
        try:
            await flow.run(page)
        except ScraperError as e:
            logger.error("Login failed: %s", e)
            raise AuthenticationError(f"Authentication failed: {e}", reason=e.reason) from e
        return SessionStrategy.LIVE_LOGIN
