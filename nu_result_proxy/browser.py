"""
Shared Playwright browser for the proxy.

Chromium is launched once and driven from its own event loop on a background
thread; Flask request threads hand coroutines to that loop and block on the
result. Every form load gets a fresh context that is closed before returning.
"""

import asyncio
import concurrent.futures
import enum
import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List

from playwright.async_api import async_playwright

from nu_result_proxy.config import DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)


class BrowserState(enum.Enum):
    STARTING = "starting"
    READY = "ready"
    FAILED = "failed"
    STOPPED = "stopped"


class BrowserNotReady(RuntimeError):
    """Raised when the shared browser is used before a successful launch."""


@dataclass
class FormPage:
    url: str
    html: str
    cookies: List[Dict] = field(default_factory=list)


class ResultBrowser:
    def __init__(
        self,
        headless: bool = True,
        user_agent: str = DEFAULT_USER_AGENT,
        navigation_timeout_ms: int = 30000,
        launch_timeout: float = 60.0,
        timeout_margin: float = 10.0,
    ):
        self.headless = headless
        self.user_agent = user_agent
        self.navigation_timeout_ms = navigation_timeout_ms
        self.launch_timeout = launch_timeout
        self.timeout_margin = timeout_margin
        self.state = BrowserState.STARTING
        self.open_sessions = 0

        self._playwright = None
        self._browser = None
        self._sessions_lock = threading.Lock()
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._loop.run_forever, name="playwright-loop", daemon=True
        )

    @property
    def ready(self) -> bool:
        return self.state is BrowserState.READY

    def _run(self, coro, timeout: float):
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        try:
            return future.result(timeout=timeout)
        except concurrent.futures.TimeoutError:
            # on 3.11+ this also catches a TimeoutError raised by the coroutine
            if future.done():
                raise
            # cancelling the task still runs its finally blocks on the loop
            future.cancel()
            raise TimeoutError(f"Browser did not answer within {timeout}s")

    @property
    def session_timeout(self) -> float:
        return self.navigation_timeout_ms / 1000 + self.timeout_margin

    def start(self) -> BrowserState:
        """Launch Chromium. A failed launch leaves the state FAILED instead of raising."""
        if not self._thread.is_alive():
            self._thread.start()

        try:
            self._run(self._launch(), timeout=self.launch_timeout)
        except Exception as e:
            self.state = BrowserState.FAILED
            logger.error(f"Failed to launch browser: {e}")
        else:
            self.state = BrowserState.READY
            logger.info("Playwright browser launched")
        return self.state

    async def _launch(self):
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=self.headless)

    def load_form(self, form_url: str) -> FormPage:
        """Navigate to form_url in a fresh context and capture its markup and cookies."""
        if not self.ready:
            raise BrowserNotReady("Browser not ready")
        return self._run(self._load_form(form_url), timeout=self.session_timeout)

    async def _load_form(self, form_url: str) -> FormPage:
        context = await self._browser.new_context(user_agent=self.user_agent)
        self._track_session(1)
        try:
            page = await context.new_page()
            logger.info(f"Visiting: {form_url}")
            await page.goto(
                form_url,
                wait_until="networkidle",
                timeout=self.navigation_timeout_ms,
            )
            html = await page.content()
            cookies = await context.cookies()
        finally:
            try:
                await context.close()
            finally:
                self._track_session(-1)

        return FormPage(url=form_url, html=html, cookies=cookies)

    def _track_session(self, delta: int):
        with self._sessions_lock:
            self.open_sessions += delta

    def stop(self):
        if self.state is BrowserState.STOPPED:
            return

        if self._thread.is_alive():
            try:
                self._run(self._shutdown(), timeout=self.timeout_margin)
            except Exception as e:
                logger.error(f"Error closing browser: {e}")
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join(timeout=5)

        if not self._thread.is_alive():
            self._loop.close()

        self.state = BrowserState.STOPPED
        logger.info("Playwright browser stopped")

    async def _shutdown(self):
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
