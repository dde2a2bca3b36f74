import json
import os
import re
from typing import Iterable, List

from playwright.async_api import Page
from pydantic import ValidationError

from .config import COOKIE_DOMAIN, COOKIES_FILE, SESSION_COOKIE_NAME
from .errors import PersistenceError
from .models import SessionCookie
from .scraper_logging import get_logger

logger = get_logger("cookies")


def sanitize_cookie(raw: dict) -> dict | None:
    """Normalize one raw cookie dict, or return None if it is unusable.

    - Removes whitespace from values
    - Substitutes `.linkedin.com` / `/` when domain or path are absent
    - Normalizes `sameSite` values to the browser's spelling
    - Drops browser-extension export keys
    """
    if not isinstance(raw, dict):
        return None
    c = dict(raw)
    if isinstance(c.get("value"), str):
        c["value"] = re.sub(r"\s+", "", c["value"])  # strip whitespace/newlines
    if not c.get("name") or not c.get("value"):
        return None

    domain = c.get("domain") or COOKIE_DOMAIN
    if not domain.startswith("."):
        domain = "." + domain
    if "linkedin.com" not in domain:
        return None
    c["domain"] = domain
    c["path"] = c.get("path") or "/"

    if c.get("sameSite") is not None:
        ss = str(c["sameSite"]).lower()
        if ss in ["no_restriction", "none"]:
            c["sameSite"] = "None"
        elif ss in ["lax", "strict"]:
            c["sameSite"] = ss.capitalize()
        else:
            c["sameSite"] = "Lax"

    if "expirationDate" in c and "expires" not in c:
        c["expires"] = c["expirationDate"]
    for k in ["hostOnly", "session", "storeId", "id", "expirationDate", "size", "priority",
              "sameParty", "sourceScheme", "sourcePort", "partitionKey"]:
        c.pop(k, None)
    return c


class CookieStore:
    """JSON-file backed store for the session cookie set.

    The file holds a JSON array of cookies and is replaced wholesale on every
    save; entries are never merged.
    """

    def __init__(self, path: str = COOKIES_FILE):
        self.path = path

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def load(self) -> List[SessionCookie]:
        if not self.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Could not read cookie file %s: %s", self.path, e)
            return []
        if not isinstance(raw, list):
            logger.warning("Cookie file %s does not hold a JSON array", self.path)
            return []

        cookies: List[SessionCookie] = []
        for entry in raw:
            clean = sanitize_cookie(entry)
            if clean is None:
                continue
            try:
                cookies.append(SessionCookie.model_validate(clean))
            except ValidationError:
                continue
        logger.info("Loaded %d cookies from %s", len(cookies), self.path)
        return cookies

    def save(self, cookies: Iterable[SessionCookie]) -> None:
        payload = [c.to_browser_cookie() for c in cookies]
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
        except OSError as e:
            raise PersistenceError(f"Failed to write cookies to {self.path}: {e}") from e
        logger.info("Cookies saved to %s", self.path)


def has_session_cookie(cookies: Iterable[SessionCookie]) -> bool:
    return any(c.name == SESSION_COOKIE_NAME for c in cookies)


def direct_session_cookie(value: str) -> SessionCookie:
    """Build the `li_at` cookie for a value supplied through configuration."""
    return SessionCookie(
        name=SESSION_COOKIE_NAME,
        value=re.sub(r"\s+", "", value),
        domain=COOKIE_DOMAIN,
        path="/",
        http_only=True,
        secure=True,
        same_site="None",
    )


async def apply_cookies(page: Page, cookies: List[SessionCookie]) -> bool:
    """Apply cookies to the page's browser context.

    Returns True when a `li_at` session cookie was among them.
    """
    if not cookies:
        return False
    await page.context.add_cookies([c.to_browser_cookie() for c in cookies])
    return has_session_cookie(cookies)
