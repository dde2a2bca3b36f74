"""Error taxonomy shared by the scraper pipeline and the HTTP layer.

Each error carries a short machine-readable `reason` and the HTTP status the
service answers with when the error escapes a request.
"""


class ScraperError(Exception):
    status_code = 500
    default_reason = "scrapeFailed"

    def __init__(self, message: str = "", reason: str | None = None):
        super().__init__(message or self.__class__.__name__)
        self.reason = reason or self.default_reason


class InvalidRequestError(ScraperError):
    status_code = 400
    default_reason = "invalidRequest"


class ScrapeTimeoutError(ScraperError):
    status_code = 408
    default_reason = "requestTimeout"


class ConfigurationError(ScraperError):
    default_reason = "missingCredentials"


class ResourceError(ScraperError):
    default_reason = "launchFailed"


class NavigationError(ScraperError):
    default_reason = "navigationFailed"


class AuthenticationError(ScraperError):
    default_reason = "authenticationFailed"


class ExtractionError(ScraperError):
    default_reason = "extractionFailed"


class PersistenceError(ScraperError):
    default_reason = "persistenceFailed"
