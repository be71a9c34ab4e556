"""Browser engines and the page fetcher built on top of them."""

from __future__ import annotations

import logging
from threading import Lock
from typing import Any

from requests import Session
from requests.adapters import HTTPAdapter

from .errors import ConfigError, FetchError
from .models import BrowserEngine, BrowserSession
from .validation import is_supported_url


def describe_exception(exc: BaseException) -> str:
    """One-line description of an engine error; Selenium messages carry stack traces."""
    lines = str(exc).strip().splitlines()
    return lines[0] if lines else type(exc).__name__


def make_http_session(user_agent: str, pool_maxsize: int = 20) -> Session:
    """Create a requests session sized for concurrent use, without retries."""
    session = Session()
    session.headers.update({"User-Agent": user_agent})
    adapter = HTTPAdapter(pool_connections=pool_maxsize, pool_maxsize=pool_maxsize, max_retries=0)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class RequestsBrowserSession:
    """Plain-HTTP stand-in for a browser; no JavaScript is executed."""

    def __init__(self, http: Session) -> None:
        self._http = http
        self._html = ""
        self._closed = False

    def navigate(self, url: str, timeout: float) -> None:
        if self._closed:
            raise RuntimeError("session is closed")
        response = self._http.get(url, timeout=timeout)
        response.raise_for_status()
        self._html = str(response.text)

    def content(self) -> str:
        return self._html

    def close(self) -> None:
        self._closed = True
        self._html = ""


class RequestsEngine:
    """Engine handing out lightweight HTTP sessions over one shared requests.Session."""

    def __init__(self, *, http: Session) -> None:
        self._http = http

    def launch(self) -> RequestsBrowserSession:
        return RequestsBrowserSession(self._http)

    def close(self) -> None:
        self._http.close()


class SeleniumBrowserSession:
    """One headless Chrome instance driven through Selenium."""

    def __init__(self, driver: Any) -> None:
        self._driver = driver

    def navigate(self, url: str, timeout: float) -> None:
        self._driver.set_page_load_timeout(timeout)
        self._driver.get(url)

    def wait_for_dom(self, timeout: float) -> bool:
        """Wait for a <body> element; False if it never showed up."""
        from selenium.common.exceptions import WebDriverException
        from selenium.webdriver.common.by import By
        from selenium.webdriver.support import expected_conditions
        from selenium.webdriver.support.ui import WebDriverWait

        try:
            WebDriverWait(self._driver, timeout).until(
                expected_conditions.presence_of_element_located((By.TAG_NAME, "body"))
            )
        except WebDriverException:
            return False
        return True

    def content(self) -> str:
        return str(self._driver.page_source)

    def close(self) -> None:
        self._driver.quit()


class SeleniumEngine:
    """Launches isolated headless Chrome sessions."""

    def __init__(self, *, user_agent: str, logger: logging.Logger) -> None:
        try:
            from selenium import webdriver
            from selenium.webdriver.chrome.service import (
                Service as ChromeService,
            )
            from webdriver_manager.chrome import ChromeDriverManager
        except ImportError as exc:  # pragma: no cover - depends on environment
            raise ConfigError(
                "Selenium dependencies are not installed. Use pip install selenium webdriver-manager."
            ) from exc

        self._webdriver = webdriver
        self._service_cls = ChromeService
        self._driver_manager = ChromeDriverManager
        self._user_agent = user_agent
        self._logger = logger
        self._driver_path: str | None = None
        self._lock = Lock()

    def _resolve_driver_path(self) -> str:
        with self._lock:
            if self._driver_path is None:
                self._driver_path = self._driver_manager().install()
                self._logger.debug("Using chromedriver at %s", self._driver_path)
            return self._driver_path

    def _options(self) -> Any:
        options = self._webdriver.ChromeOptions()
        options.add_argument("--headless=new")
        options.add_argument("--no-sandbox")
        options.add_argument("--disable-setuid-sandbox")
        options.add_argument("--disable-dev-shm-usage")
        options.add_argument(f"user-agent={self._user_agent}")
        return options

    def launch(self) -> SeleniumBrowserSession:
        service = self._service_cls(self._resolve_driver_path())
        driver = self._webdriver.Chrome(service=service, options=self._options())
        return SeleniumBrowserSession(driver)

    def close(self) -> None:
        return None


def build_engine(
    name: str, *, user_agent: str, pool_size: int, logger: logging.Logger
) -> BrowserEngine:
    """Create the engine selected by name."""
    if name == "selenium":
        return SeleniumEngine(user_agent=user_agent, logger=logger)
    if name == "requests":
        return RequestsEngine(http=make_http_session(user_agent, pool_maxsize=pool_size))
    raise ConfigError(f"Unknown engine: {name}")


class PageFetcher:
    """Navigate a leased session and read back its rendered HTML."""

    def __init__(self, *, logger: logging.Logger, dom_ready_timeout: float = 5.0) -> None:
        self._logger = logger
        self._dom_ready_timeout = dom_ready_timeout

    def fetch(self, session: BrowserSession, url: str, timeout: float = 30.0) -> str:
        """Return HTML for url, raising FetchError on navigation failure. Single attempt."""
        if not is_supported_url(url):
            raise FetchError(url, "unsupported URL")
        try:
            session.navigate(url, timeout)
        except Exception as exc:
            self._logger.debug("Navigation failed for %s: %s", url, exc)
            raise FetchError(url, describe_exception(exc)) from exc

        wait_fn = getattr(session, "wait_for_dom", None)
        if callable(wait_fn) and self._dom_ready_timeout > 0:
            try:
                ready = wait_fn(self._dom_ready_timeout)
            except Exception as exc:
                self._logger.debug("DOM wait failed for %s: %s", url, describe_exception(exc))
                ready = False
            if not ready:
                self._logger.debug("No DOM ready signal for %s, reading HTML anyway", url)

        try:
            return str(session.content())
        except Exception as exc:
            raise FetchError(url, f"could not read page content: {describe_exception(exc)}") from exc
