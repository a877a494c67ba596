"""
Page Rendering - Playwright Module

Renders a case page in headless Chromium and returns its heading texts and
body text for name extraction.  One browser per page; it is always closed.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union
from urllib.parse import urlparse

from playwright.async_api import (
    async_playwright,
    Error as PlaywrightError,
    TimeoutError as PlaywrightTimeoutError,
)

logger = logging.getLogger(__name__)

HEADING_SELECTOR = 'h1,h2,h3'

# Text served by the case tool while its login/verification gate is up
INTERSTITIAL_PHRASES = (
    '認証中',
    '認証を確認しています',
    'verification in progress',
    'verifying you are human',
)


@dataclass
class RenderResult:
    """Text captured from a rendered page."""
    http_status: Optional[int]
    heading_texts: List[str] = field(default_factory=list)
    body_text: str = ''


@dataclass
class RenderFailure:
    """Page could not be rendered into usable content.

    ``reason`` is one of ``timeout``, ``nav_error`` or ``auth_check``.
    """
    reason: str
    detail: str = ''


RenderOutcome = Union[RenderResult, RenderFailure]


def is_allowed_host(url: str, allowed_hosts: Sequence[str]) -> bool:
    """True if *url* is http(s) on an allowed host or one of its subdomains."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if parsed.scheme not in ('http', 'https'):
        return False
    host = (parsed.hostname or '').lower()
    if not host:
        return False
    for allowed in allowed_hosts:
        allowed = allowed.lower()
        if host == allowed or host.endswith('.' + allowed):
            return True
    return False


def detect_interstitial(body_text: str) -> Optional[str]:
    """Return the loading-gate phrase found in *body_text*, if any."""
    lowered = (body_text or '').lower()
    for phrase in INTERSTITIAL_PHRASES:
        if phrase.lower() in lowered:
            return phrase
    return None


class PageRenderer:
    """Headless Chromium renderer for case pages."""

    def __init__(
        self,
        nav_timeout_ms: int = 30000,
        settle_timeout_ms: int = 5000,
        body_max_chars: int = 5000,
        headless: bool = True,
    ):
        self.nav_timeout_ms = nav_timeout_ms
        self.settle_timeout_ms = settle_timeout_ms
        self.body_max_chars = body_max_chars
        self.headless = headless

    @classmethod
    def from_config(cls, config) -> 'PageRenderer':
        return cls(
            nav_timeout_ms=config.nav_timeout_ms,
            settle_timeout_ms=config.settle_timeout_ms,
            body_max_chars=config.body_max_chars,
        )

    async def render(self, url: str) -> RenderOutcome:
        """Navigate to *url* and capture heading and body text."""
        logger.info("Rendering %s", url)
        async with async_playwright() as playwright:
            browser = await playwright.chromium.launch(
                headless=self.headless,
                args=['--no-sandbox', '--disable-dev-shm-usage']
            )
            try:
                context = await browser.new_context(
                    extra_http_headers={'Accept-Language': 'ja,en;q=0.8'}
                )
                page = await context.new_page()

                try:
                    response = await page.goto(
                        url,
                        wait_until='networkidle',
                        timeout=self.nav_timeout_ms
                    )
                except PlaywrightTimeoutError as e:
                    logger.warning("Navigation timed out for %s", url)
                    return RenderFailure('timeout', str(e))
                except PlaywrightError as e:
                    logger.warning("Navigation failed for %s: %s", url, e)
                    return RenderFailure('nav_error', str(e))

                # Client-side rendering may lag behind networkidle
                try:
                    await page.wait_for_selector(
                        HEADING_SELECTOR, timeout=self.settle_timeout_ms
                    )
                except PlaywrightTimeoutError:
                    logger.info("No heading appeared within %dms, using page as-is",
                                self.settle_timeout_ms)

                heading_texts = await page.eval_on_selector_all(
                    HEADING_SELECTOR,
                    "els => els.map(e => e.innerText || '')"
                )
                body_text = await page.evaluate(
                    "() => document.body ? document.body.innerText : ''"
                )
            finally:
                await browser.close()

        body_text = (body_text or '')[:self.body_max_chars]
        phrase = detect_interstitial(body_text)
        if phrase:
            logger.warning("Loading gate detected on %s (%r)", url, phrase)
            return RenderFailure('auth_check', phrase)

        return RenderResult(
            http_status=response.status if response else None,
            heading_texts=[h.strip() for h in heading_texts if h and h.strip()],
            body_text=body_text,
        )
