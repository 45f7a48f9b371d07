import logging
import time
from typing import Optional

from selenium.common.exceptions import WebDriverException
from selenium.webdriver.chrome.webdriver import WebDriver
from selenium.webdriver.support.ui import WebDriverWait

from visible_copy.config import PickerConfig
from visible_copy.dom.builder import DocumentBuilder
from visible_copy.dom.document import Document
from visible_copy.driver import new_webdriver
from visible_copy.extraction.extractor import extract_html, extract_text
from visible_copy.live.bridge import BrowserClipboard, LivePageBridge
from visible_copy.picker.launcher import PickerLauncher
from visible_copy.types import CopyMode

logger = logging.getLogger(__name__)


class VisibleCopy:
    def __init__(self, headless: bool = False, config: Optional[PickerConfig] = None) -> None:
        """
        Initialize the VisibleCopy instance.

        Args:
            headless: Run the browser without a window (extraction only)
            config: Picker configuration, read from the environment if omitted
        """
        self.config: PickerConfig = config or PickerConfig.from_env()
        self.driver: WebDriver = None
        self.headless: bool = headless
        self._setup_driver()

    def __enter__(self):
        """Support for context manager protocol."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Ensure browser is closed when exiting context."""
        self.close()

    def close(self) -> None:
        """Close the browser and clean up resources."""
        if self.driver:
            self.driver.quit()
            self.driver = None

    def extract(self, selector: str, mode: Optional[CopyMode] = None) -> Optional[str]:
        """
        Extract the visible content of the first element matching a selector.

        Args:
            selector: CSS selector of the element to extract
            mode: html or text, defaults to the configured mode

        Returns:
            str or None: The extracted content, None if nothing matched
        """
        document, target = self.snapshot(selector)
        if target is None:
            logger.warning(f"No element matches {selector!r}")
            return None

        mode = CopyMode(mode or self.config.default_mode)
        if mode == CopyMode.HTML:
            return extract_html(document, target)
        return extract_text(document, target)

    def navigate_to(self, url: str) -> bool:
        """
        Navigate to the specified URL and wait for it to render.

        Args:
            url: The URL to navigate to

        Returns:
            bool: True if navigation was successful, False otherwise
        """
        try:
            self.driver.get(url)
            self._wait_for_page_load()
            return True
        except WebDriverException as e:
            logger.error(f"Navigation to {url} failed: {str(e)}")
            return False

    def pick(self) -> Optional[str]:
        """
        Run the interactive picker on the current page until it ends.

        Returns:
            str or None: The copied content, None if the picker was cancelled
        """
        document, _ = self.snapshot()
        bridge = LivePageBridge(self.driver, document, self.config)
        bridge.install()

        launcher = PickerLauncher(BrowserClipboard(self.driver), self.config)
        session = launcher.trigger(document)
        return bridge.run(session)

    def snapshot(self, selector: Optional[str] = None) -> tuple[Document, Optional[int]]:
        """Capture the current page as a Document."""
        return DocumentBuilder.from_driver(self.driver, selector)

    def _setup_driver(self):
        """Initialize the web driver."""
        self.driver = new_webdriver(self.headless)

    def _wait_for_page_load(self):
        """Wait for the page to fully load."""
        time.sleep(self.config.parse_delay)
        WebDriverWait(self.driver, 10).until(
            lambda d: d.execute_script("return document.readyState")
            == "complete"
        )
