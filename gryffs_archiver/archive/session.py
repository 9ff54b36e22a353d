"""
Authenticated catalog session using Playwright.

Holds the operator's browser, the page used for navigation and DOM
queries, and an aiohttp client that carries the browser's cookies for
protected asset downloads.
"""

import asyncio
import os
from dataclasses import dataclass
from http.cookies import SimpleCookie
from typing import Any, Dict, List, Optional

import aiohttp
from aiohttp import ClientTimeout, ClientError
from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Error as PlaywrightError,
    TimeoutError as PlaywrightTimeout,
)

from ..errors import FetchError, SessionNotReadyError
from ..utils.log import get_logger
from ..utils.constants import DEFAULT_USER_AGENT, DEFAULT_TIMEOUT, DEFAULT_PAGE_TIMEOUT


@dataclass
class HttpResponse:
    """Result of an authenticated GET request."""

    url: str
    status: int
    reason: str
    body: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


def load_cookies(jar: aiohttp.CookieJar, cookies: List[Dict[str, Any]]) -> aiohttp.CookieJar:
    """
    Replace the contents of an aiohttp cookie jar with browser cookies.

    Args:
        jar: Jar to overwrite
        cookies: Cookies as returned by ``BrowserContext.cookies()``

    Returns:
        The same jar, scoped to the cookies' domains and paths
    """
    jar.clear()
    for cookie in cookies:
        name = cookie["name"]
        morsel = SimpleCookie()
        morsel[name] = cookie["value"]
        if cookie.get("domain"):
            morsel[name]["domain"] = cookie["domain"]
        morsel[name]["path"] = cookie.get("path") or "/"
        if cookie.get("secure"):
            morsel[name]["secure"] = True
        jar.update_cookies(morsel)
    return jar


def build_cookie_jar(cookies: List[Dict[str, Any]]) -> aiohttp.CookieJar:
    """Convert Playwright context cookies into a new aiohttp cookie jar."""
    return load_cookies(aiohttp.CookieJar(), cookies)


class CatalogSession:
    """
    Browser session against the catalog.

    The session only counts as ready once the operator has confirmed the
    login (or a saved login was loaded) and ``mark_ready()`` was called.
    """

    def __init__(
        self,
        base_url: str,
        timeout: int = DEFAULT_PAGE_TIMEOUT,
        request_timeout: int = DEFAULT_TIMEOUT,
        wait_until: str = "load",
        headless: bool = False,
        user_agent: str = DEFAULT_USER_AGENT,
        session_file: Optional[str] = None
    ):
        """
        Initialize the catalog session.

        Args:
            base_url: Catalog root URL
            timeout: Page load timeout in milliseconds
            request_timeout: Asset request timeout in seconds
            wait_until: Event to wait for ('load', 'domcontentloaded', 'networkidle')
            headless: Run browser in headless mode
            user_agent: User agent for the browser and asset requests
            session_file: Optional Playwright storage state file to reuse a login
        """
        self.base_url = base_url
        self.timeout = timeout
        self.request_timeout = ClientTimeout(total=request_timeout)
        self.wait_until = wait_until
        self.headless = headless
        self.user_agent = user_agent
        self.session_file = session_file
        self.logger = get_logger("session")

        self._playwright = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._http: Optional[aiohttp.ClientSession] = None
        self._ready = False

    @property
    def has_saved_state(self) -> bool:
        """Whether a saved login can be loaded on start."""
        return bool(self.session_file) and os.path.exists(self.session_file)

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def url(self) -> str:
        return self._page.url if self._page else ""

    def mark_ready(self) -> None:
        """Record the operator-confirmed login."""
        self._ready = True
        self.logger.debug("Session marked as authenticated")

    def require_ready(self) -> None:
        """
        Raise unless the login has been confirmed.

        Raises:
            SessionNotReadyError: If ``mark_ready()`` has not been called
        """
        if not self._ready:
            raise SessionNotReadyError(
                "The catalog session is not authenticated yet; "
                "confirm the login before archiving"
            )

    async def start(self) -> None:
        """
        Start the Playwright browser and open the catalog page.
        """
        self.logger.info("Starting Playwright browser...")
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self.headless,
            args=[
                '--disable-blink-features=AutomationControlled',
            ]
        )

        storage_state = self.session_file if self.has_saved_state else None
        self._context = await self._browser.new_context(
            user_agent=self.user_agent,
            viewport={"width": 1280, "height": 900},
            storage_state=storage_state,
        )
        self._page = await self._context.new_page()
        self._page.set_default_timeout(self.timeout)

        if storage_state:
            self.logger.info(f"Loaded saved session from {storage_state}")

        self.logger.info("Browser started successfully")

    async def stop(self) -> None:
        """
        Stop the HTTP client and the Playwright browser.
        """
        if self._http:
            await self._http.close()
            self._http = None
        if self._context:
            await self._context.close()
            self._context = None
            self._page = None
        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None
        self.logger.info("Browser stopped")

    async def save_state(self, path: Optional[str] = None) -> str:
        """
        Save the browser's cookies and local storage for later runs.

        Args:
            path: Target file, defaults to the configured session file

        Returns:
            Path the state was written to
        """
        target = path or self.session_file
        if not target:
            raise ValueError("No session file configured")
        await self._context.storage_state(path=target)
        self.logger.info(f"Saved session to {target}")
        return target

    async def navigate(self, url: str) -> None:
        """
        Navigate the session page to a URL.

        Args:
            url: URL to load

        Raises:
            FetchError: On timeout, navigation failure or HTTP error status
        """
        self.logger.debug(f"Navigating: {url}")
        try:
            response = await self._page.goto(
                url,
                wait_until=self.wait_until,
                timeout=self.timeout
            )
        except PlaywrightTimeout as e:
            raise FetchError(url, reason="Timeout loading page") from e
        except PlaywrightError as e:
            raise FetchError(url, reason=str(e)) from e

        if response and response.status >= 400:
            raise FetchError(url, response.status, response.status_text)

    async def content(self) -> str:
        """Return the rendered HTML of the current page."""
        return await self._page.content()

    async def eval_on_selector(self, selector: str, expression: str) -> Any:
        """
        Evaluate a JavaScript function against the first matching element.

        Args:
            selector: CSS selector
            expression: JavaScript function source receiving the element

        Returns:
            The function's result, or None if nothing matches
        """
        element = await self._page.query_selector(selector)
        if element is None:
            return None
        return await element.evaluate(expression)

    async def eval_on_selector_all(self, selector: str, expression: str) -> List[Any]:
        """
        Evaluate a JavaScript function against all matching elements.

        Args:
            selector: CSS selector
            expression: JavaScript function source receiving the element list

        Returns:
            The function's result (an empty list when nothing matches)
        """
        result = await self._page.eval_on_selector_all(selector, expression)
        return result or []

    async def authenticated_get(self, url: str) -> HttpResponse:
        """
        Issue a GET request carrying the browser session's cookies.

        The cookies are re-read from the browser before every request.

        Args:
            url: URL to fetch

        Returns:
            HttpResponse with status and body

        Raises:
            FetchError: On transport errors or timeouts
        """
        http = await self.sync_cookies()
        try:
            async with http.get(url, allow_redirects=True) as response:
                body = await response.read()
                return HttpResponse(
                    url=url,
                    status=response.status,
                    reason=response.reason or "",
                    body=body
                )
        except asyncio.TimeoutError as e:
            raise FetchError(url, reason="Timeout") from e
        except ClientError as e:
            raise FetchError(url, reason=str(e)) from e

    async def sync_cookies(self) -> aiohttp.ClientSession:
        """
        Copy the browser's current cookies into the HTTP client.

        The client is created on first use. Its jar is reloaded on every
        call so rotated or re-issued browser cookies are picked up.

        Returns:
            The cookie-carrying HTTP client

        Raises:
            SessionNotReadyError: If the login has not been confirmed
        """
        self.require_ready()
        cookies = await self._context.cookies()
        if self._http is None:
            self._http = aiohttp.ClientSession(
                timeout=self.request_timeout,
                headers={"User-Agent": self.user_agent, "Referer": self.base_url + "/"},
                cookie_jar=aiohttp.CookieJar(),
            )
            self.logger.debug("HTTP client created")
        load_cookies(self._http.cookie_jar, cookies)
        return self._http

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.stop()
