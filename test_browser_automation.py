"""
Tests for the page renderer and its helpers; Playwright is replaced by
in-memory stand-ins
"""

import asyncio

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from corp_sync import browser_automation
from corp_sync.browser_automation import (
    PageRenderer,
    RenderFailure,
    RenderResult,
    detect_interstitial,
    is_allowed_host,
)
from corp_sync.utils import local_timestamp, truncate

HOSTS = ('tool.readycrew.cloud',)


@pytest.mark.parametrize('url,allowed', [
    ('https://tool.readycrew.cloud/cases/1', True),
    ('http://TOOL.READYCREW.CLOUD/x', True),
    ('https://eu.tool.readycrew.cloud/x', True),
    ('https://tool.readycrew.cloud.evil.com/x', False),
    ('https://eviltool.readycrew.cloud/x', False),
    ('ftp://tool.readycrew.cloud/x', False),
    ('tool.readycrew.cloud/x', False),
    ('', False),
    ('https://[::1', False),
])
def test_is_allowed_host(url, allowed):
    assert is_allowed_host(url, HOSTS) is allowed


def test_detect_interstitial():
    assert detect_interstitial('ただいま認証中です。しばらくお待ちください') == '認証中'
    assert detect_interstitial('Verification in progress...') == 'verification in progress'
    assert detect_interstitial('3007608：株式会社Example') is None
    assert detect_interstitial('') is None


def test_renderer_from_config(config):
    config.nav_timeout_ms = 1234
    renderer = PageRenderer.from_config(config)
    assert renderer.nav_timeout_ms == 1234
    assert renderer.settle_timeout_ms == config.settle_timeout_ms
    assert renderer.body_max_chars == config.body_max_chars
    assert renderer.headless is True


def test_local_timestamp_uses_fixed_offset():
    from datetime import datetime, timezone
    now = datetime(2026, 1, 31, 20, 5, 9, tzinfo=timezone.utc)
    assert local_timestamp(9, now) == '2026-02-01T05:05:09'
    assert local_timestamp(0, now) == '2026-01-31T20:05:09'


def test_truncate():
    assert truncate('a\n b', 10) == 'a b'
    assert truncate('abcdef', 3) == 'abc'
    assert truncate(None, 3) == ''


# ------------------------------------------------------------------
# PageRenderer.render against a stand-in Playwright
# ------------------------------------------------------------------


class _Response:
    def __init__(self, status):
        self.status = status


class _Page:
    def __init__(self, headings=(), body='', status=200, goto_error=None, wait_error=None):
        self.headings = list(headings)
        self.body = body
        self.status = status
        self.goto_error = goto_error
        self.wait_error = wait_error
        self.goto_kwargs = None

    async def goto(self, url, **kwargs):
        self.goto_kwargs = kwargs
        if self.goto_error:
            raise self.goto_error
        return _Response(self.status)

    async def wait_for_selector(self, selector, timeout=None):
        if self.wait_error:
            raise self.wait_error

    async def eval_on_selector_all(self, selector, script):
        return self.headings

    async def evaluate(self, script):
        return self.body


class _Browser:
    def __init__(self, page):
        self.page = page
        self.closed = False
        self.context_kwargs = None

    async def new_context(self, **kwargs):
        self.context_kwargs = kwargs
        return self

    async def new_page(self):
        return self.page

    async def close(self):
        self.closed = True


class _Playwright:
    def __init__(self, browser):
        self.chromium = self
        self.browser = browser

    async def launch(self, **kwargs):
        return self.browser

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


@pytest.fixture()
def fake_browser(monkeypatch):
    """Install a stand-in Playwright serving *page*; returns the browser."""
    def _install(page):
        browser = _Browser(page)
        monkeypatch.setattr(browser_automation, 'async_playwright', lambda: _Playwright(browser))
        return browser
    return _install


def _render(renderer, url='https://tool.readycrew.cloud/x'):
    return asyncio.run(renderer.render(url))


def test_render_captures_headings_and_body(fake_browser):
    page = _Page(headings=[' 3007608：株式会社Example ', '', '  '], body='本文')
    browser = fake_browser(page)

    result = _render(PageRenderer(nav_timeout_ms=1234))

    assert result == RenderResult(200, ['3007608：株式会社Example'], '本文')
    assert page.goto_kwargs['timeout'] == 1234
    assert browser.context_kwargs['extra_http_headers']['Accept-Language'].startswith('ja')
    assert browser.closed


def test_navigation_timeout_is_a_failure(fake_browser):
    browser = fake_browser(_Page(goto_error=PlaywrightTimeoutError('Timeout 30000ms exceeded')))

    result = _render(PageRenderer())

    assert isinstance(result, RenderFailure)
    assert result.reason == 'timeout'
    assert browser.closed


def test_navigation_error_is_a_failure(fake_browser):
    browser = fake_browser(_Page(goto_error=PlaywrightError('net::ERR_NAME_NOT_RESOLVED')))

    result = _render(PageRenderer())

    assert result.reason == 'nav_error'
    assert 'ERR_NAME_NOT_RESOLVED' in result.detail
    assert browser.closed


def test_browser_closed_on_unexpected_error(fake_browser):
    browser = fake_browser(_Page(goto_error=RuntimeError('crashed')))

    with pytest.raises(RuntimeError):
        _render(PageRenderer())
    assert browser.closed


def test_missing_heading_after_settle_wait_is_not_fatal(fake_browser):
    page = _Page(body='1234567：株式会社Body', wait_error=PlaywrightTimeoutError('no h1'))
    fake_browser(page)

    result = _render(PageRenderer())

    assert isinstance(result, RenderResult)
    assert result.heading_texts == []
    assert result.body_text == '1234567：株式会社Body'


def test_loading_gate_in_lead_text_is_auth_check(fake_browser):
    fake_browser(_Page(body='ただいま認証中です'))

    result = _render(PageRenderer())

    assert result == RenderFailure('auth_check', '認証中')


def test_body_truncated_before_gate_check(fake_browser):
    fake_browser(_Page(body='x' * 50 + '認証中'))

    result = _render(PageRenderer(body_max_chars=20))

    assert isinstance(result, RenderResult)
    assert result.body_text == 'x' * 20


def test_http_status_is_reported(fake_browser):
    fake_browser(_Page(status=503))
    assert _render(PageRenderer()).http_status == 503
