import pytest

import webai_agent.core.browser as browser
from webai_agent.core.browser import BrowserSession, launch_browser


class FakeBrowser:
    def __init__(self, fail_new_page=False):
        self.closed = 0
        self.fail_new_page = fail_new_page
        self.page_kwargs = None

    def new_page(self, **kwargs):
        if self.fail_new_page:
            raise RuntimeError("page crashed")
        self.page_kwargs = kwargs
        return "page"

    def close(self):
        self.closed += 1


class FakeChromium:
    def __init__(self, browser=None, error=None):
        self.browser = browser
        self.error = error
        self.launch_kwargs = None

    def launch(self, **kwargs):
        self.launch_kwargs = kwargs
        if self.error:
            raise self.error
        return self.browser


class FakePlaywright:
    def __init__(self, chromium):
        self.chromium = chromium
        self.stopped = 0

    def stop(self):
        self.stopped += 1


class FakeStarter:
    def __init__(self, playwright):
        self.playwright = playwright

    def start(self):
        return self.playwright


def _patch(monkeypatch, playwright):
    monkeypatch.setattr(browser, "sync_playwright", lambda: FakeStarter(playwright))


def test_close_is_idempotent():
    b = FakeBrowser()
    p = FakePlaywright(FakeChromium(b))
    session = BrowserSession(p, b, "page")
    session.close()
    session.close()
    assert b.closed == 1
    assert p.stopped == 1
    assert session.browser is None and session.playwright is None and session.page is None


def test_launch_browser(monkeypatch):
    b = FakeBrowser()
    p = FakePlaywright(FakeChromium(b))
    _patch(monkeypatch, p)

    session = launch_browser(headless=True, viewport={"width": 1200, "height": 1200})
    assert session.page == "page"
    assert p.chromium.launch_kwargs == {"headless": True}
    assert b.page_kwargs == {"viewport": {"width": 1200, "height": 1200}, "device_scale_factor": 1}


def test_failed_launch_stops_playwright(monkeypatch):
    p = FakePlaywright(FakeChromium(error=RuntimeError("no chromium installed")))
    _patch(monkeypatch, p)

    with pytest.raises(RuntimeError):
        launch_browser(headless=True, viewport={"width": 800, "height": 600})
    assert p.stopped == 1


def test_failed_new_page_stops_playwright(monkeypatch):
    p = FakePlaywright(FakeChromium(FakeBrowser(fail_new_page=True)))
    _patch(monkeypatch, p)

    with pytest.raises(RuntimeError):
        launch_browser(headless=False, viewport={"width": 800, "height": 600})
    assert p.stopped == 1
