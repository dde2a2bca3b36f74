#!/usr/bin/env python3
"""
LinkedIn Profile Scraper - CLI Standalone Version

Scrapes one LinkedIn profile with the same pipeline the HTTP service uses
and prints (or saves) the normalized profile record.

Usage:
    python scraper.py <LINKEDIN_URL> [OPTIONS]

Example:
    python scraper.py https://www.linkedin.com/in/johndoe/
    python scraper.py https://www.linkedin.com/in/johndoe/ --headless false -o profile.json
"""

import argparse
import asyncio
import json
import sys

from linkedin_profile_pkg.config import ScraperSettings
from linkedin_profile_pkg.errors import ScraperError
from linkedin_profile_pkg.orchestrator import ScrapeOrchestrator
from linkedin_profile_pkg.response import build_response
from linkedin_profile_pkg.scraper_logging import configure_logging


async def scrape_profile(url: str, settings: ScraperSettings) -> dict:
    orchestrator = ScrapeOrchestrator.from_settings(settings)
    try:
        outcome = await orchestrator.scrape(url)
    finally:
        await orchestrator.close()
    return build_response(outcome.record, outcome.saved_to)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Scrape a LinkedIn profile into a normalized JSON record",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s https://www.linkedin.com/in/johndoe/
  %(prog)s https://www.linkedin.com/in/johndoe/ --mobile
  %(prog)s https://www.linkedin.com/in/johndoe/ --headless false --cookies my_cookies.json
        """,
    )
    parser.add_argument("url", help="LinkedIn profile URL to scrape (e.g., https://www.linkedin.com/in/username/)")
    parser.add_argument(
        "--headless",
        type=lambda x: x.lower() in ("true", "1", "yes"),
        default=None,
        help="Run browser in headless mode (default: SCRAPER_HEADLESS or true)",
    )
    parser.add_argument("--mobile", action="store_true", help="Use mobile emulation")
    parser.add_argument("--cookies", help="Path to the cookie file (default: LINKEDIN_COOKIES_PATH)")
    parser.add_argument("--extract-mode", choices=["evaluate", "content"], help="How page markup is captured")
    parser.add_argument("--output", "-o", help="Output file path (JSON). If not specified, prints to stdout")
    parser.add_argument("--log-level", default=None, help="Logging level (default: SCRAPER_LOG_LEVEL or INFO)")
    return parser


def main() -> None:
    args = build_parser().parse_args()
    configure_logging(args.log_level)

    overrides = {"browser_policy": "ephemeral"}
    if args.headless is not None:
        overrides["headless"] = args.headless
    if args.mobile:
        overrides["mobile"] = True
    if args.cookies:
        overrides["cookies_file"] = args.cookies
    if args.extract_mode:
        overrides["extract_mode"] = args.extract_mode
    settings = ScraperSettings.from_env().model_copy(update=overrides)

    try:
        result = asyncio.run(scrape_profile(args.url, settings))
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(130)
    except ScraperError as e:
        print(f"Error ({e.reason}): {e}", file=sys.stderr)
        sys.exit(1)

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            json.dump(result, f, indent=2, ensure_ascii=False)
        print(f"Results saved to: {args.output}")
    else:
        print(json.dumps(result, indent=2, ensure_ascii=False))
    sys.exit(0 if result.get("fullName") else 1)


if __name__ == "__main__":
    main()
