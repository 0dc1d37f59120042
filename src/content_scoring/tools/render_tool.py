"""Render tool - render pages with a headless browser."""

import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

import httpx

from ..config.loader import RenderPolicy

logger = logging.getLogger(__name__)


@dataclass
class RenderResult:
    """Result from render_tool."""

    html: str
    final_url: str
    http_status: Optional[int] = None
    title: str = ""
    load_time_ms: int = 0
    error: str | None = None


def render_tool(url: str, policy: RenderPolicy | None = None) -> RenderResult:
    """
    Render page with Playwright (headless Chromium).
    Fonts and media are blocked; the page is read once the network is idle.
    """
    policy = policy or RenderPolicy()
    try:
        from playwright.sync_api import sync_playwright
    except ImportError:
        return RenderResult(
            html="",
            final_url=url,
            error="playwright not installed. Run: pip install playwright && playwright install chromium",
        )

    blocked = set(policy.blocked_resource_types)
    start_time = time.time()
    try:
        with sync_playwright() as p:
            browser = p.chromium.launch(headless=True, args=["--disable-dev-shm-usage"])
            try:
                context = browser.new_context(
                    user_agent=policy.user_agent,
                    viewport={"width": 1920, "height": 1080},
                )
                page = context.new_page()
                if blocked:
                    page.route(
                        "**/*",
                        lambda route: route.abort()
                        if route.request.resource_type in blocked
                        else route.continue_(),
                    )
                response = page.goto(url, wait_until=policy.wait_until, timeout=policy.timeout_ms)
                html = page.content()
                result = RenderResult(
                    html=html,
                    final_url=page.url,
                    http_status=response.status if response else None,
                    title=page.title(),
                    load_time_ms=int((time.time() - start_time) * 1000),
                )
            finally:
                browser.close()
        if result.http_status and result.http_status >= 400:
            result.error = f"HTTP {result.http_status}"
        logger.debug("Rendered %s in %dms (%d bytes)", url, result.load_time_ms, len(result.html))
        return result
    except Exception as e:
        return RenderResult(html="", final_url=url, error=str(e))


def fetch_page(url: str, policy: RenderPolicy | None = None) -> RenderResult:
    """
    Plain HTTP fetch without JavaScript. Used when render_policy.use_browser is off.
    """
    policy = policy or RenderPolicy()
    start_time = time.time()
    try:
        with httpx.Client(
            timeout=policy.timeout_ms / 1000,
            follow_redirects=True,
            trust_env=False,
            headers={"User-Agent": policy.user_agent},
        ) as client:
            response = client.get(url)
    except Exception as e:
        return RenderResult(html="", final_url=url, error=str(e))

    if response.status_code >= 400:
        return RenderResult(
            html="",
            final_url=str(response.url),
            http_status=response.status_code,
            error=f"HTTP {response.status_code}",
        )
    return RenderResult(
        html=response.text,
        final_url=str(response.url),
        http_status=response.status_code,
        load_time_ms=int((time.time() - start_time) * 1000),
    )


class RenderPool:
    """
    Bounded pool of render leases. At most max_concurrent renders run at once;
    each lease launches its own browser, so leases can be taken from any thread.
    """

    def __init__(self, policy: RenderPolicy):
        self.policy = policy
        self.max_concurrent = policy.max_concurrent_pages
        self._semaphore = threading.BoundedSemaphore(self.max_concurrent)
        self._lock = threading.Lock()
        self._active = 0

    @property
    def active(self) -> int:
        return self._active

    @contextmanager
    def lease(self) -> Iterator["RenderPool"]:
        if not self._semaphore.acquire(blocking=False):
            logger.info("Max pages (%d) reached, waiting for a render slot...", self.max_concurrent)
            self._semaphore.acquire()
        with self._lock:
            self._active += 1
        try:
            yield self
        finally:
            with self._lock:
                self._active -= 1
            self._semaphore.release()

    def render(self, url: str) -> RenderResult:
        with self.lease():
            if self.policy.use_browser:
                return render_tool(url, self.policy)
            return fetch_page(url, self.policy)
