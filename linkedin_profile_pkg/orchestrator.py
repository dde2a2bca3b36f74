import asyncio
from dataclasses import dataclass
from typing import Optional

from .browser import BrowserManager
from .config import ScraperSettings
from .errors import InvalidRequestError, PersistenceError, ScrapeTimeoutError
from .extraction import capture_markup, extract_profile
from .models import ProfileRecord
from .navigation import goto_profile, target_url, wait_for_primary_content
from .scraper_logging import get_logger
from .selectors import primary_marker
from .session import SessionManager
from .storage import ResultStore

logger = get_logger("orchestrator")


@dataclass
class ScrapeOutcome:
    record: ProfileRecord
    saved_to: Optional[str] = None


class ScrapeOrchestrator:
    """Runs one profile scrape end to end.

    Steps run strictly in order: acquire a page, ensure the session,
    navigate, wait (best effort) for the title, extract, persist. The page is
    released on every exit path, including when the overall deadline fires.
    """

    def __init__(
        self,
        settings: ScraperSettings,
        browser_manager: Optional[BrowserManager] = None,
        session_manager: Optional[SessionManager] = None,
        result_store: Optional[ResultStore] = None,
    ):
        self.settings = settings
        self.browser_manager = browser_manager or BrowserManager(settings)
        self.session_manager = session_manager or SessionManager(
            settings, persistent=self.browser_manager.shared
        )
        self.result_store = result_store or ResultStore(settings.result_file)

    @classmethod
    def from_settings(cls, settings: ScraperSettings) -> "ScrapeOrchestrator":
        return cls(settings)

    async def scrape(self, profile_url: Optional[str]) -> ScrapeOutcome:
        if not profile_url or not profile_url.strip():
            raise InvalidRequestError("Profile URL is required", reason="missingProfileUrl")
        try:
            return await asyncio.wait_for(self._run(profile_url.strip()), timeout=self.settings.request_timeout_s)
        except asyncio.TimeoutError as e:
            logger.error("Scraping operation timed out after %.0f seconds", self.settings.request_timeout_s)
            raise ScrapeTimeoutError("Scraping took too long and was terminated") from e

    async def _run(self, profile_url: str) -> ScrapeOutcome:
        handle = None
        page = None
        try:
            handle = await self.browser_manager.acquire()
            page = await self.browser_manager.new_page(handle)

            strategy = await self.session_manager.ensure_session(page)
            logger.info("Session ready (%s)", strategy.value if strategy else "cached")

            url = target_url(profile_url, self.settings.mobile, self.settings.mobile_host)
            logger.info("Navigating to LinkedIn profile %s", url)
            await goto_profile(page, url, self.settings.navigation_timeout_ms)
            await wait_for_primary_content(page, primary_marker(self.settings.mobile), self.settings.element_timeout_ms)

            markup = await capture_markup(page, self.settings.extract_mode, self.settings.mobile)
            result = extract_profile(markup, profile_url=profile_url, mobile=self.settings.mobile)
            if result.failed_sections:
                logger.warning("Sections returned empty after parse errors: %s", ", ".join(result.failed_sections))

            saved_to = None
            try:
                saved_to = self.result_store.save(result.record)
                logger.info("Scraped data saved to %s", saved_to)
            except PersistenceError as e:
                logger.error("%s", e)
            return ScrapeOutcome(record=result.record, saved_to=saved_to)
        finally:
            if handle is not None:
                await self.browser_manager.release(page, handle)

    async def close(self) -> None:
        await self.browser_manager.close()
