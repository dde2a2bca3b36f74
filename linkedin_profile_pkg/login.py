"""Interactive LinkedIn login driven as a small state machine.

The flow types the configured credentials into the login form, dispatches
the submit click without waiting for the response, then polls the page's
cookies once per interval until the `li_at` session cookie shows up or the
attempt budget is spent.
"""
import asyncio
import enum
from typing import List, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .config import LOGIN_URL, LOGIN_USER_AGENT, SESSION_COOKIE_NAME, ScraperSettings
from .cookies_auth import CookieStore, sanitize_cookie
from .errors import AuthenticationError, ConfigurationError, NavigationError, PersistenceError
from .models import SessionCookie
from .scraper_logging import get_logger, save_screenshot

logger = get_logger("login")


class LoginState(enum.Enum):
    NOT_STARTED = "NotStarted"
    NAVIGATING_TO_LOGIN = "NavigatingToLogin"
    SUBMITTING_CREDENTIALS = "SubmittingCredentials"
    POLLING_FOR_COOKIE = "PollingForCookie"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"


class LoginFlow:
    """One login attempt against one page.

    `run()` returns the session cookies on success and raises on failure;
    the final state and `failure_reason` stay inspectable afterwards.
    """

    def __init__(self, settings: ScraperSettings, cookie_store: CookieStore):
        self.settings = settings
        self.cookie_store = cookie_store
        self.state = LoginState.NOT_STARTED
        self.failure_reason: Optional[str] = None
        self.attempts = 0

    def _fail(self, reason: str) -> None:
        self.state = LoginState.FAILED
        self.failure_reason = reason

    async def run(self, page: Page) -> List[SessionCookie]:
        email = self.settings.linkedin_email
        password = self.settings.linkedin_password
        if not email or not password:
            self._fail("missingCredentials")
            raise ConfigurationError(
                "LinkedIn credentials are missing. Set LINKEDIN_EMAIL and LINKEDIN_PASSWORD.",
                reason="missingCredentials",
            )

        self.state = LoginState.NAVIGATING_TO_LOGIN
        logger.info("Navigating to LinkedIn login page")
        try:
            await page.set_extra_http_headers({"User-Agent": LOGIN_USER_AGENT})
            await page.goto(LOGIN_URL, wait_until="networkidle", timeout=self.settings.navigation_timeout_ms)
        except PlaywrightTimeoutError as e:
            self._fail("navigationTimeout")
            raise NavigationError(f"Login page did not load: {e}", reason="navigationTimeout") from e
        except PlaywrightError as e:
            self._fail("navigationFailed")
            raise NavigationError(f"Login page did not load: {e}", reason="navigationFailed") from e

        self.state = LoginState.SUBMITTING_CREDENTIALS
        logger.info("Submitting login form")
        try:
            await page.fill("#username", email)
            await page.fill("#password", password)
            await page.click("button[type=submit]", no_wait_after=True)
        except PlaywrightError as e:
            self._fail("submitFailed")
            raise AuthenticationError(f"Could not submit the login form: {e}", reason="submitFailed") from e

        self.state = LoginState.POLLING_FOR_COOKIE
        cookie = await self._poll_for_session_cookie(page)
        if cookie is None:
            self._fail("cookieTimeout")
            await save_screenshot(page, self.settings.login_screenshot_file)
            raise AuthenticationError(
                f"'{SESSION_COOKIE_NAME}' cookie not found after {self.attempts} attempts. "
                f"Login may have failed. Check {self.settings.login_screenshot_file}.",
                reason="cookieTimeout",
            )

        self.state = LoginState.SUCCEEDED
        cookies = [cookie]
        try:
            self.cookie_store.save(cookies)
        except PersistenceError as e:
            logger.error("%s", e)
        return cookies

    async def _poll_for_session_cookie(self, page: Page) -> Optional[SessionCookie]:
        logger.info("Waiting for '%s' session cookie", SESSION_COOKIE_NAME)
        budget = self.settings.login_poll_attempts
        for attempt in range(1, budget + 1):
            self.attempts = attempt
            for raw in await page.context.cookies():
                if raw.get("name") == SESSION_COOKIE_NAME:
                    logger.info("'%s' cookie found on attempt %d", SESSION_COOKIE_NAME, attempt)
                    return SessionCookie.model_validate(sanitize_cookie(raw) or raw)
            if attempt < budget:
                await asyncio.sleep(self.settings.login_poll_interval_s)
        return None
