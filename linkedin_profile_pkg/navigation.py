from urllib.parse import urlsplit, urlunsplit

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .errors import NavigationError
from .scraper_logging import get_logger

logger = get_logger("navigation")


def target_url(profile_url: str, mobile: bool = False, mobile_host: str = "m.linkedin.com") -> str:
    """Return the URL to load, switching LinkedIn hosts for mobile emulation."""
    url = profile_url.strip()
    if not url.startswith("http"):
        url = f"https://{url}"
    if not mobile:
        return url
    parts = urlsplit(url)
    if parts.netloc.endswith("linkedin.com"):
        parts = parts._replace(netloc=mobile_host)
    return urlunsplit(parts)


async def goto_profile(page: Page, url: str, timeout_ms: int) -> None:
    """Navigate to the profile; failures here are fatal for the request."""
    try:
        await page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
    except PlaywrightTimeoutError as e:
        raise NavigationError(f"Timed out loading {url}", reason="navigationTimeout") from e
    except PlaywrightError as e:
        raise NavigationError(f"Could not load {url}: {e}", reason="navigationFailed") from e
    logger.info("Navigation successful")


async def wait_for_primary_content(page: Page, selector: str, timeout_ms: int) -> bool:
    """Best-effort wait for the profile title.

    Returns False on timeout instead of raising; extraction runs on whatever
    has rendered by then.
    """
    try:
        await page.wait_for_selector(selector, timeout=timeout_ms)
        return True
    except PlaywrightTimeoutError:
        logger.info("Profile name element not found quickly, continuing anyway")
        return False
