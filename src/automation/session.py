"""
Automation session: one shared headless Chromium per batch.

The orchestrator owns the session. Extractor and dispatcher calls borrow an
isolated browser context from it through `page_scope()`, which closes that
context on every exit path.
"""

import asyncio
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional

from src.core.exceptions import SessionStartFailed
from src.core.logging import get_logger
from src.core.config import DEFAULT_USER_AGENT

logger = get_logger(__name__)

# Sandbox flags are required in containers without the setuid helper.
LAUNCH_ARGS: List[str] = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
    "--disable-blink-features=AutomationControlled",
]

VIEWPORT = {"width": 1920, "height": 1080}

BrowserFactory = Callable[["AutomationSession"], Awaitable[Any]]


@dataclass
class SessionHandle:
    """Live browser process plus page accounting."""
    browser: Any
    created_at: float = field(default_factory=time.time)
    open_pages: int = 0
    pages_opened: int = 0
    pages_closed: int = 0
    live: bool = True


class AutomationSession:
    """
    Lazily started, explicitly released headless browser.

    Args:
        headless: Run Chromium without a window
        user_agent: Client identity string set on every page context
        launch_args: Chromium command-line flags
        browser_factory: Optional coroutine returning a browser object,
            replaces the Playwright launch (used by tests)

    Example:
        >>> session = AutomationSession()
        >>> try:
        ...     async with session.page_scope() as page:
        ...         await page.goto("https://competitor.com")
        ... finally:
        ...     await session.release()
    """

    def __init__(
        self,
        headless: bool = True,
        user_agent: str = DEFAULT_USER_AGENT,
        launch_args: Optional[List[str]] = None,
        browser_factory: Optional[BrowserFactory] = None,
    ):
        self.headless = headless
        self.user_agent = user_agent
        self.launch_args = list(launch_args) if launch_args is not None else list(LAUNCH_ARGS)
        self._browser_factory = browser_factory or _launch_chromium
        self._handle: Optional[SessionHandle] = None
        self._playwright = None
        self._lock = asyncio.Lock()
        self.launch_count = 0
        self.release_count = 0

    @property
    def handle(self) -> Optional[SessionHandle]:
        return self._handle

    @property
    def is_live(self) -> bool:
        return self._handle is not None and self._handle.live

    async def acquire(self) -> SessionHandle:
        """
        Return the live handle, starting the browser if needed.

        Raises:
            SessionStartFailed: If the browser cannot be launched
        """
        async with self._lock:
            if self.is_live:
                return self._handle

            logger.info(f"Launching Chromium (headless={self.headless})")
            try:
                browser = await self._browser_factory(self)
            except SessionStartFailed:
                raise
            except Exception as e:
                await self._stop_playwright()
                raise SessionStartFailed(f"browser launch failed: {e}") from e

            self.launch_count += 1
            self._handle = SessionHandle(browser=browser)
            return self._handle

    async def release(self) -> None:
        """Close the browser and invalidate the handle. No-op if never started."""
        handle = self._handle
        self._handle = None
        if handle is None:
            await self._stop_playwright()
            return

        handle.live = False
        self.release_count += 1
        try:
            await handle.browser.close()
        except Exception as e:
            logger.warning(f"Browser close failed: {e}")
        finally:
            await self._stop_playwright()

        if handle.open_pages:
            logger.warning(f"Session released with {handle.open_pages} page(s) still open")
        logger.info(
            f"Session released: {handle.pages_opened} pages opened, {handle.pages_closed} closed"
        )

    @asynccontextmanager
    async def page_scope(self):
        """
        Yield a fresh page in its own browser context.

        The context (and with it the page) is closed exactly once, whether the
        body returns or raises.
        """
        handle = await self.acquire()
        context = await handle.browser.new_context(user_agent=self.user_agent, viewport=VIEWPORT)
        handle.open_pages += 1
        handle.pages_opened += 1
        try:
            page = await context.new_page()
            yield page
        finally:
            handle.open_pages -= 1
            handle.pages_closed += 1
            try:
                await context.close()
            except Exception as e:
                logger.warning(f"Page context close failed: {e}")

    async def _stop_playwright(self) -> None:
        pw = self._playwright
        self._playwright = None
        if pw is not None:
            try:
                await pw.stop()
            except Exception as e:
                logger.warning(f"Playwright driver stop failed: {e}")


async def _launch_chromium(session: AutomationSession):
    from playwright.async_api import async_playwright

    session._playwright = await async_playwright().start()
    return await session._playwright.chromium.launch(
        headless=session.headless,
        args=session.launch_args,
    )
