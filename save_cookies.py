#!/usr/bin/env python3
"""
Helper script to save a LinkedIn session cookie.

Logs in with LINKEDIN_EMAIL / LINKEDIN_PASSWORD in a visible browser window
(so checkpoints can be solved by hand while the cookie poll runs) and writes
the `li_at` cookie to the cookie file the service reads.
"""

import argparse
import asyncio
import sys

from linkedin_profile_pkg.browser import BrowserManager
from linkedin_profile_pkg.config import ScraperSettings
from linkedin_profile_pkg.cookies_auth import CookieStore
from linkedin_profile_pkg.errors import ScraperError
from linkedin_profile_pkg.login import LoginFlow
from linkedin_profile_pkg.scraper_logging import configure_logging


async def main(headless: bool, wait_seconds: int) -> int:
    settings = ScraperSettings.from_env().model_copy(
        update={
            "headless": headless,
            "browser_policy": "ephemeral",
            "block_resources": False,
            "login_poll_attempts": wait_seconds,
        }
    )
    manager = BrowserManager(settings)
    handle = await manager.acquire()
    page = None
    try:
        page = await manager.new_page(handle)
        flow = LoginFlow(settings, CookieStore(settings.cookies_file))
        cookies = await flow.run(page)
    except ScraperError as e:
        print(f"Login failed ({e.reason}): {e}", file=sys.stderr)
        return 1
    finally:
        await manager.release(page, handle)

    print(f"Saved {len(cookies)} cookie(s) to {settings.cookies_file}")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Log in to LinkedIn and save the session cookie")
    parser.add_argument("--headless", action="store_true", help="Run without a visible window")
    parser.add_argument("--wait", type=int, default=300, help="Seconds to wait for the li_at cookie (default: 300)")
    args = parser.parse_args()
    configure_logging()
    sys.exit(asyncio.run(main(args.headless, args.wait)))
