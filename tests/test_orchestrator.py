import asyncio
import json

import pytest

from conftest import FakeBrowserManager, FakeContext, FakePage
from linkedin_profile_pkg.errors import (
    AuthenticationError,
    InvalidRequestError,
    NavigationError,
    ScrapeTimeoutError,
)
from linkedin_profile_pkg.orchestrator import ScrapeOrchestrator

PAGE_HTML = """
<h1>Jane Q. Public</h1>
<span class="text-body-small inline t-black--light break-words">Austin, TX, United States</span>
<section><div id="experience"></div><div><ul><li>
  <div class="hoverable-link-text"><span aria-hidden="true">Engineer</span></div>
  <span class="t-14 t-normal"><span aria-hidden="true">Acme · Full-time</span></span>
</li></ul></div></section>
"""


@pytest.fixture
def authed(settings):
    return settings.model_copy(update={"li_at_cookie": "env-token"})


def test_scrape_returns_record_and_persists_it(authed):
    page = FakePage(FakeContext(), html=PAGE_HTML)
    manager = FakeBrowserManager(authed, page)
    orchestrator = ScrapeOrchestrator(authed, browser_manager=manager)

    outcome = asyncio.run(orchestrator.scrape("https://www.linkedin.com/in/jane/"))

    assert outcome.record.full_name == "Jane Q. Public"
    assert outcome.record.city == "Austin"
    assert outcome.record.worked_previously == "yes"
    assert outcome.saved_to == authed.result_file
    with open(authed.result_file, encoding="utf-8") as f:
        assert json.load(f)["fullName"] == "Jane Q. Public"
    assert page.visited == ["https://www.linkedin.com/in/jane/"]
    assert manager.released == [page] and page.closed


def test_empty_url_acquires_nothing(authed):
    manager = FakeBrowserManager(authed, FakePage())
    orchestrator = ScrapeOrchestrator(authed, browser_manager=manager)
    with pytest.raises(InvalidRequestError):
        asyncio.run(orchestrator.scrape("   "))
    assert manager.acquired == 0


def test_missing_title_marker_is_not_fatal(authed):
    page = FakePage(FakeContext(), html="<html></html>", selector_timeout=True)
    orchestrator = ScrapeOrchestrator(authed, browser_manager=FakeBrowserManager(authed, page))
    outcome = asyncio.run(orchestrator.scrape("https://www.linkedin.com/in/nobody/"))
    assert outcome.record.full_name == ""
    assert outcome.record.linkedin_url == "https://www.linkedin.com/in/nobody/"


def test_navigation_timeout_is_fatal_and_releases_page(authed):
    page = FakePage(FakeContext(), goto_timeout=True)
    manager = FakeBrowserManager(authed, page)
    orchestrator = ScrapeOrchestrator(authed, browser_manager=manager)
    with pytest.raises(NavigationError) as exc:
        asyncio.run(orchestrator.scrape("https://www.linkedin.com/in/jane/"))
    assert exc.value.reason == "navigationTimeout"
    assert manager.released == [page]


def test_authentication_failure_releases_page(settings):
    page = FakePage(FakeContext())
    manager = FakeBrowserManager(settings, page)
    orchestrator = ScrapeOrchestrator(settings, browser_manager=manager)
    with pytest.raises(AuthenticationError) as exc:
        asyncio.run(orchestrator.scrape("https://www.linkedin.com/in/jane/"))
    assert exc.value.reason == "missingCredentials"
    assert manager.released == [page]
    assert not orchestrator.session_manager.ready


def test_overall_deadline_releases_page(authed):
    page = FakePage(FakeContext(), goto_delay=5)
    settings = authed.model_copy(update={"request_timeout_s": 0.05})
    manager = FakeBrowserManager(settings, page)
    orchestrator = ScrapeOrchestrator(settings, browser_manager=manager)
    with pytest.raises(ScrapeTimeoutError):
        asyncio.run(orchestrator.scrape("https://www.linkedin.com/in/jane/"))
    assert manager.released == [page]
    assert page.closed


def test_persistence_failure_is_not_fatal(authed, tmp_path):
    settings = authed.model_copy(update={"result_file": str(tmp_path / "missing-dir" / "out.json")})
    page = FakePage(FakeContext(), html=PAGE_HTML)
    orchestrator = ScrapeOrchestrator(settings, browser_manager=FakeBrowserManager(settings, page))
    outcome = asyncio.run(orchestrator.scrape("https://www.linkedin.com/in/jane/"))
    assert outcome.saved_to is None
    assert outcome.record.full_name == "Jane Q. Public"


def test_mobile_mode_switches_host(authed):
    settings = authed.model_copy(update={"mobile": True})
    page = FakePage(FakeContext(), html="<h1>Jane</h1>")
    orchestrator = ScrapeOrchestrator(settings, browser_manager=FakeBrowserManager(settings, page))
    asyncio.run(orchestrator.scrape("https://www.linkedin.com/in/jane/"))
    assert page.visited == ["https://m.linkedin.com/in/jane/"]
