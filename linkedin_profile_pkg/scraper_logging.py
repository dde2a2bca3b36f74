import logging
import os
from typing import Optional

LOGGER_NAME = "linkedin_profile"

_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return a child of the package logger, e.g. `linkedin_profile.login`."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Install a single console handler on the package logger.

    Safe to call more than once; only the first call attaches a handler.
    """
    global _configured
    logger = logging.getLogger(LOGGER_NAME)
    level_name = (level or os.environ.get("SCRAPER_LOG_LEVEL", "INFO")).upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))
    if not _configured:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s"))
        logger.addHandler(handler)
        logger.propagate = False
        _configured = True

    for noisy in ("asyncio", "urllib3", "httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    return logger


async def save_screenshot(page, path: str) -> Optional[str]:
    """Capture a full-page screenshot for diagnostics.

    Returns the path, or None if capturing fails. Never raises, so it can be
    called while another error is being propagated.
    """
    try:
        await page.screenshot(path=path, full_page=True)
        return path
    except Exception as e:
        get_logger("diagnostics").debug("Screenshot capture failed: %s", e)
        return None
