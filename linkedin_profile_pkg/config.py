import os
import random
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, default))
    except (TypeError, ValueError):
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.environ.get(name, default))
    except (TypeError, ValueError):
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ["1", "true", "yes", "on"]


LINKEDIN_URL = "https://www.linkedin.com"
LOGIN_URL = f"{LINKEDIN_URL}/login"
COOKIE_DOMAIN = ".linkedin.com"
SESSION_COOKIE_NAME = "li_at"

COOKIES_FILE = os.environ.get("LINKEDIN_COOKIES_PATH", "linked_cookies.json")
RESULT_FILE = os.environ.get("SCRAPER_RESULT_PATH", "scrappedData.json")
LOGIN_SCREENSHOT_FILE = os.environ.get("SCRAPER_LOGIN_SCREENSHOT", "login_error.png")
SLOW_MO_MS = _env_int("SCRAPER_SLOW_MO_MS", 0)

# Fixed desktop UA used for the login form; matches what the cookie is bound to.
LOGIN_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/125.0.0.0 Safari/537.36"
)

MOBILE_DEVICE = "iPhone 13"


def user_agents():
    """Return a curated pool of desktop Chrome user agents."""
    return [
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/130.0.0.0 Safari/537.36",
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    ]


def random_user_agent():
    """Pick a random user agent from the pool.

    Callers can seed randomness externally if they need reproducibility.
    """
    return random.choice(user_agents())


class ScraperSettings(BaseModel):
    """Process configuration for one scraper service instance.

    Built once from the environment and handed to the browser manager,
    session manager and orchestrator, so request handling never reads
    ambient globals.
    """
    linkedin_email: Optional[str] = None
    linkedin_password: Optional[str] = None
    li_at_cookie: Optional[str] = None

    cookies_file: str = COOKIES_FILE
    result_file: str = RESULT_FILE
    login_screenshot_file: str = LOGIN_SCREENSHOT_FILE

    navigation_timeout_ms: int = 120000
    default_timeout_ms: int = 90000
    element_timeout_ms: int = 30000
    request_timeout_s: float = 300.0

    login_poll_attempts: int = 60
    login_poll_interval_s: float = 1.0

    launch_retries: int = 2
    browser_policy: str = "shared"
    block_resources: bool = True
    extract_mode: str = "evaluate"
    mobile: bool = False
    mobile_host: str = "m.linkedin.com"
    headless: bool = True
    stealth: bool = True
    slow_mo_ms: int = SLOW_MO_MS
    executable_path: Optional[str] = None

    @property
    def shared_browser(self) -> bool:
        return self.browser_policy != "ephemeral"

    @classmethod
    def from_env(cls) -> "ScraperSettings":
        return cls(
            linkedin_email=os.environ.get("LINKEDIN_EMAIL") or None,
            linkedin_password=os.environ.get("LINKEDIN_PASSWORD") or None,
            li_at_cookie=os.environ.get("LI_AT_COOKIE") or None,
            cookies_file=COOKIES_FILE,
            result_file=RESULT_FILE,
            login_screenshot_file=LOGIN_SCREENSHOT_FILE,
            navigation_timeout_ms=_env_int("SCRAPER_NAVIGATION_TIMEOUT_MS", 120000),
            default_timeout_ms=_env_int("SCRAPER_DEFAULT_TIMEOUT_MS", 90000),
            element_timeout_ms=_env_int("SCRAPER_ELEMENT_TIMEOUT_MS", 30000),
            request_timeout_s=_env_float("SCRAPER_REQUEST_TIMEOUT_S", 300.0),
            login_poll_attempts=_env_int("SCRAPER_LOGIN_POLL_ATTEMPTS", 60),
            login_poll_interval_s=_env_float("SCRAPER_LOGIN_POLL_INTERVAL_S", 1.0),
            launch_retries=max(1, _env_int("SCRAPER_LAUNCH_RETRIES", 2)),
            browser_policy=os.environ.get("SCRAPER_BROWSER_POLICY", "shared").lower(),
            block_resources=_env_bool("SCRAPER_BLOCK_RESOURCES", True),
            extract_mode=os.environ.get("SCRAPER_EXTRACT_MODE", "evaluate").lower(),
            mobile=_env_bool("SCRAPER_MOBILE", False),
            mobile_host=os.environ.get("SCRAPER_MOBILE_HOST", "m.linkedin.com"),
            headless=_env_bool("SCRAPER_HEADLESS", True),
            stealth=_env_bool("SCRAPER_STEALTH", True),
            slow_mo_ms=SLOW_MO_MS,
            executable_path=(
                os.environ.get("SCRAPER_EXECUTABLE_PATH")
                or os.environ.get("PUPPETEER_EXECUTABLE_PATH")
                or None
            ),
        )
