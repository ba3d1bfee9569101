"""
Rendering Engines

Blocking headless-browser renderers used by the render queue. Each call owns
one browser instance with an isolated profile and always tears it down.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence
import os
import shutil
import sys
import tempfile
import threading

from selenium import webdriver
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.common.by import By
from selenium.webdriver.support.ui import WebDriverWait
from selenium.webdriver.support import expected_conditions as EC
from selenium.common.exceptions import TimeoutException, WebDriverException

from jobparser.core.config import Settings, get_settings
from jobparser.core.exceptions import RenderException, RenderUnavailableException
from jobparser.utils.logger import get_logger

logger = get_logger(__name__)

BROWSER_EXECUTABLES = ("chromium", "chromium-browser", "google-chrome", "google-chrome-stable")

BROWSER_CANDIDATE_PATHS = (
    "/usr/bin/chromium",
    "/usr/bin/chromium-browser",
    "/usr/bin/google-chrome",
    "/usr/bin/google-chrome-stable",
    "/snap/bin/chromium",
    "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
    "/Applications/Chromium.app/Contents/MacOS/Chromium",
    r"C:\Program Files\Google\Chrome\Application\chrome.exe",
    r"C:\Program Files (x86)\Google\Chrome\Application\chrome.exe",
)

CHROME_ARGUMENTS = (
    "--headless=new",
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--disable-web-security",
    "--disable-features=VizDisplayCompositor",
    "--disable-blink-features=AutomationControlled",
    "--disable-extensions",
    "--disable-plugins",
    "--blink-settings=imagesEnabled=false",
    "--no-first-run",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
    "--memory-pressure-off",
    "--window-size=1920,1080",
)

CONTENT_SELECTORS = ("h1", "main", "[role='main']", ".content", "#content")


def find_system_browser(explicit_path: Optional[str] = None) -> Optional[str]:
    """
    Locate a Chrome/Chromium binary.

    Checks the explicit path first, then PATH, then well-known install
    locations.

    Returns:
        Optional[str]: Executable path, or None to let Selenium Manager
        provide a managed browser
    """
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        logger.warning(f"Configured browser binary not found: {explicit_path}")

    for executable in BROWSER_EXECUTABLES:
        found = shutil.which(executable)
        if found:
            return found

    for candidate in BROWSER_CANDIDATE_PATHS:
        if os.path.isfile(candidate):
            return candidate

    return None


class RenderingEngine(ABC):
    """Interface for blocking page renderers run on worker threads."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Engine name."""
        pass

    @abstractmethod
    def probe(self) -> bool:
        """Whether this engine can render at all in this process."""
        pass

    @abstractmethod
    def render(
        self,
        url: str,
        wait_seconds: float,
        timeout_seconds: float,
        cancel_event: threading.Event,
    ) -> str:
        """
        Load a URL in a fresh browser and return the rendered HTML.

        Args:
            url: Page to load
            wait_seconds: Extra time allowed for client-side rendering
            timeout_seconds: Page-load bound
            cancel_event: Set by the caller when the result is no longer wanted

        Raises:
            RenderException: Browser launch, navigation or capture failed
        """
        pass

    def describe(self) -> List[str]:
        return [self.name] if self.probe() else []


class UnavailableRenderingEngine(RenderingEngine):
    """Placeholder engine used when rendering is disabled."""

    def __init__(self, reason: str = "rendering disabled") -> None:
        self.reason = reason

    @property
    def name(self) -> str:
        return "unavailable"

    def probe(self) -> bool:
        return False

    def render(self, url, wait_seconds, timeout_seconds, cancel_event) -> str:
        raise RenderUnavailableException(url=url)


class SeleniumRenderingEngine(RenderingEngine):
    """
    Headless Chrome through Selenium WebDriver.

    Args:
        binary_path: Explicit browser binary; discovered when omitted
        user_agent: User-Agent presented by the browser
    """

    def __init__(self, binary_path: Optional[str] = None, user_agent: Optional[str] = None) -> None:
        settings = get_settings()
        self.binary_path = find_system_browser(binary_path)
        self.user_agent = user_agent or settings.HTTP_USER_AGENT

    @property
    def name(self) -> str:
        return "selenium-chrome"

    def probe(self) -> bool:
        # Selenium Manager downloads a managed browser when none is installed
        return True

    def describe(self) -> List[str]:
        browser = self.binary_path or "selenium-manager"
        return [f"{self.name} ({browser})"]

    def _build_options(self, profile_dir: str) -> Options:
        options = Options()
        for argument in CHROME_ARGUMENTS:
            options.add_argument(argument)
        options.add_argument(f"--user-agent={self.user_agent}")
        options.add_argument(f"--user-data-dir={profile_dir}")
        if self.binary_path:
            options.binary_location = self.binary_path
        return options

    @staticmethod
    def _check_cancelled(cancel_event: threading.Event, url: str) -> None:
        if cancel_event.is_set():
            raise RenderException("Render cancelled by caller", url=url)

    def render(
        self,
        url: str,
        wait_seconds: float,
        timeout_seconds: float,
        cancel_event: threading.Event,
    ) -> str:
        profile_dir = tempfile.mkdtemp(prefix="jobparser-chrome-")
        driver: Optional[webdriver.Chrome] = None
        try:
            self._check_cancelled(cancel_event, url)
            driver = webdriver.Chrome(options=self._build_options(profile_dir))
            driver.set_page_load_timeout(timeout_seconds)
            driver.set_script_timeout(timeout_seconds)

            self._check_cancelled(cancel_event, url)
            driver.get(url)
            WebDriverWait(driver, timeout_seconds).until(
                lambda d: d.execute_script("return document.readyState") == "complete"
            )

            self._check_cancelled(cancel_event, url)
            found = self._wait_for_content(driver, CONTENT_SELECTORS, max(wait_seconds, 3))
            settle = max(wait_seconds, 2) if found else max(wait_seconds, 3)
            if cancel_event.wait(settle):
                raise RenderException("Render cancelled by caller", url=url)

            html = driver.page_source
            logger.debug("Rendered page", url=url, length=len(html), content_selector=found)
            return html

        except TimeoutException as e:
            raise RenderException(
                f"Page load timed out after {timeout_seconds} seconds", url=url
            ) from e
        except WebDriverException as e:
            raise RenderException(f"Browser render failed: {e.msg or e}", url=url) from e
        finally:
            if driver is not None:
                try:
                    driver.quit()
                except WebDriverException as e:
                    logger.warning(f"Failed to quit browser cleanly: {e}")
            shutil.rmtree(profile_dir, ignore_errors=True)

    @staticmethod
    def _wait_for_content(driver, selectors: Sequence[str], timeout: float) -> bool:
        """Wait until any content selector is present."""
        conditions = [EC.presence_of_element_located((By.CSS_SELECTOR, s)) for s in selectors]
        try:
            WebDriverWait(driver, timeout).until(EC.any_of(*conditions))
            return True
        except TimeoutException:
            return False


def create_rendering_engine(settings: Optional[Settings] = None) -> RenderingEngine:
    """Build the rendering engine described by settings."""
    settings = settings or get_settings()
    if not settings.RENDER_ENABLED:
        logger.info("Rendering disabled by configuration")
        return UnavailableRenderingEngine()

    engine = SeleniumRenderingEngine(
        binary_path=settings.CHROME_BINARY_PATH,
        user_agent=settings.HTTP_USER_AGENT,
    )
    logger.info(
        "Rendering engine configured",
        engine=engine.name,
        browser=engine.binary_path or "managed",
        platform=sys.platform,
    )
    return engine
