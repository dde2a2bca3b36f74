import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from linkedin_profile_pkg.config import ScraperSettings
from linkedin_profile_pkg.errors import ScraperError
from linkedin_profile_pkg.models import ScrapeRequest
from linkedin_profile_pkg.orchestrator import ScrapeOrchestrator
from linkedin_profile_pkg.response import build_error, build_response
from linkedin_profile_pkg.scraper_logging import configure_logging, get_logger

logger = get_logger("app")

ERROR_TITLES = {
    400: "Profile URL is required",
    408: "Request timeout",
}


def create_app(orchestrator: Optional[ScrapeOrchestrator] = None) -> FastAPI:
    """Build the HTTP service around one orchestrator.

    When no orchestrator is injected, one is built from the environment at
    startup and its shared browser is closed at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = app.state.orchestrator is None
        if owned:
            app.state.orchestrator = ScrapeOrchestrator.from_settings(ScraperSettings.from_env())
        logger.info("Server starting - cookies will be loaded on the first request that needs them")
        try:
            yield
        finally:
            if owned:
                await app.state.orchestrator.close()

    app = FastAPI(title="LinkedIn Profile Scraper", lifespan=lifespan)
    app.state.orchestrator = orchestrator

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health():
        return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.get("/")
    async def root():
        return {"message": "LinkedIn Scraper API", "status": "running"}

    @app.post("/scrape")
    async def scrape(data: ScrapeRequest) -> JSONResponse:
        if not data.profile_url or not data.profile_url.strip():
            return JSONResponse(status_code=400, content=build_error(ERROR_TITLES[400], "profileUrl is missing"))

        try:
            outcome = await app.state.orchestrator.scrape(data.profile_url)
        except ScraperError as e:
            logger.error("Error scraping LinkedIn profile: %s (%s)", e, e.reason)
            title = ERROR_TITLES.get(e.status_code, "Failed to scrape LinkedIn profile")
            return JSONResponse(status_code=e.status_code, content=build_error(title, str(e)))
        except Exception as e:
            logger.exception("Unexpected error scraping LinkedIn profile")
            return JSONResponse(status_code=500, content=build_error("Failed to scrape LinkedIn profile", str(e)))

        logger.info("Scraping completed. Sending response")
        return JSONResponse(build_response(outcome.record, outcome.saved_to))

    return app


configure_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=os.environ.get("HOST", "0.0.0.0"), port=int(os.environ.get("PORT", "3000")))
