import asyncio

import pytest

from conftest import make_handle
from linkedin_profile_pkg import browser as browser_module
from linkedin_profile_pkg.browser import BrowserManager, BrowserState, block_heavy_resources, launch_browser
from linkedin_profile_pkg.errors import ResourceError


class CountingLauncher:
    def __init__(self, failures=0):
        self.calls = 0
        self.failures = failures
        self.handles = []

    async def __call__(self, settings):
        self.calls += 1
        await asyncio.sleep(0)
        if self.calls <= self.failures:
            raise RuntimeError("chromium crashed")
        handle = make_handle()
        self.handles.append(handle)
        return handle


def test_shared_policy_launches_once_under_concurrency(settings):
    launcher = CountingLauncher()
    manager = BrowserManager(settings, launcher=launcher)

    async def run():
        return await asyncio.gather(*(manager.acquire() for _ in range(5)))

    handles = asyncio.run(run())
    assert launcher.calls == 1
    assert all(h is handles[0] for h in handles)
    assert manager.state is BrowserState.READY


def test_shared_policy_relaunches_dead_browser(settings):
    launcher = CountingLauncher()
    manager = BrowserManager(settings, launcher=launcher)
    first = asyncio.run(manager.acquire())
    first.browser.connected = False
    second = asyncio.run(manager.acquire())
    assert second is not first
    assert launcher.calls == 2


def test_launch_retries_are_bounded(settings):
    launcher = CountingLauncher(failures=10)
    manager = BrowserManager(settings.model_copy(update={"launch_retries": 3}), launcher=launcher)
    with pytest.raises(ResourceError) as exc:
        asyncio.run(manager.acquire())
    assert exc.value.reason == "launchFailed"
    assert launcher.calls == 3
    assert manager.state is BrowserState.FAILED


def test_launch_recovers_within_retry_budget(settings):
    launcher = CountingLauncher(failures=1)
    manager = BrowserManager(settings, launcher=launcher)
    asyncio.run(manager.acquire())
    assert launcher.calls == 2


def test_new_page_applies_timeouts_and_blocking(settings):
    manager = BrowserManager(settings, launcher=CountingLauncher())

    async def run():
        handle = await manager.acquire()
        return await manager.new_page(handle)

    page = asyncio.run(run())
    assert page.navigation_timeout == settings.navigation_timeout_ms
    assert page.default_timeout == settings.default_timeout_ms
    assert page.routes and page.routes[0][1] is block_heavy_resources


def test_release_keeps_shared_browser_open(settings):
    launcher = CountingLauncher()
    manager = BrowserManager(settings, launcher=launcher)

    async def run():
        handle = await manager.acquire()
        page = await manager.new_page(handle)
        await manager.release(page, handle)
        return handle, page

    handle, page = asyncio.run(run())
    assert page.closed
    assert handle.browser.is_connected()


def test_ephemeral_policy_launches_per_acquire_and_closes_on_release(settings):
    launcher = CountingLauncher()
    manager = BrowserManager(settings.model_copy(update={"browser_policy": "ephemeral"}), launcher=launcher)

    async def run():
        for _ in range(2):
            handle = await manager.acquire()
            page = await manager.new_page(handle)
            await manager.release(page, handle)

    asyncio.run(run())
    assert launcher.calls == 2
    assert all(not h.browser.is_connected() for h in launcher.handles)


class FakeRequest:
    def __init__(self, resource_type):
        self.resource_type = resource_type


class FakeRoute:
    def __init__(self, resource_type):
        self.request = FakeRequest(resource_type)
        self.outcome = None

    async def abort(self):
        self.outcome = "aborted"

    async def continue_(self):
        self.outcome = "continued"


@pytest.mark.parametrize("resource_type,expected", [
    ("image", "aborted"),
    ("stylesheet", "aborted"),
    ("font", "aborted"),
    ("media", "aborted"),
    ("document", "continued"),
    ("script", "continued"),
    ("xhr", "continued"),
])
def test_block_heavy_resources(resource_type, expected):
    route = FakeRoute(resource_type)
    asyncio.run(block_heavy_resources(route))
    assert route.outcome == expected


class HangingPlaywright:
    def __init__(self):
        self.stopped = False
        self.chromium = self

    async def launch(self, **kwargs):
        await asyncio.sleep(10)

    async def stop(self):
        self.stopped = True


def test_cancelled_launch_stops_playwright(settings, monkeypatch):
    driver = HangingPlaywright()

    class _Starter:
        async def start(self):
            return driver

    monkeypatch.setattr(browser_module, "async_playwright", lambda: _Starter())

    with pytest.raises(asyncio.TimeoutError):
        asyncio.run(asyncio.wait_for(launch_browser(settings), 0.05))
    assert driver.stopped
