from __future__ import annotations

import base64
import logging
from pathlib import Path
from time import monotonic, sleep

from selenium.common.exceptions import (
    NoSuchElementException,
    StaleElementReferenceException,
    TimeoutException,
)
from selenium.webdriver.common.by import By

from shopcheck.config.schema import SelectorStrategy
from shopcheck.utils.dom_query import (
    INNER_SIZE_SCRIPT,
    LOAD_STATE_SCRIPT,
    LOCATE_SCRIPT,
    PAGE_METRICS_SCRIPT,
    data_testid_selector,
    role_selector,
)
from shopcheck.utils.wait import wait_until

log = logging.getLogger(__name__)

NETWORK_QUIET_SECONDS = 0.5
MATCH_LIMIT = 100


class SeleniumPage:
    """The page capabilities the suite consumes, backed by a Selenium WebDriver."""

    def __init__(self, driver, poll_interval: float = 0.2) -> None:
        self.driver = driver
        self.poll_interval = poll_interval

    # navigation

    def navigate(self, url: str, wait_until: str = "load", timeout: float = 30) -> None:
        deadline = monotonic() + timeout
        self.driver.set_page_load_timeout(timeout)
        self.driver.get(url)
        remaining = max(deadline - monotonic(), 0.0)
        if wait_until != "load":
            self.wait_for_load_state(wait_until, remaining)

    def wait_for_load_state(self, state: str = "load", timeout: float = 30) -> None:
        if state == "networkidle":
            self._wait_for_network_idle(timeout)
            return
        accepted = {"interactive", "complete"} if state == "domcontentloaded" else {"complete"}
        ready = wait_until(
            lambda: self.driver.execute_script("return document.readyState;") in accepted,
            timeout,
            self.poll_interval,
        )
        if not ready:
            raise TimeoutException(f"Page did not reach {state} within {timeout:.1f}s")

    def _wait_for_network_idle(self, timeout: float) -> None:
        deadline = monotonic() + timeout
        last_count = -1
        quiet_since = monotonic()
        while True:
            ready_state, resource_count = self.driver.execute_script(LOAD_STATE_SCRIPT)
            now = monotonic()
            if ready_state != "complete" or resource_count != last_count:
                last_count = resource_count
                quiet_since = now
            elif now - quiet_since >= NETWORK_QUIET_SECONDS:
                return
            remaining = deadline - now
            if remaining <= 0:
                raise TimeoutException(f"Network did not go idle within {timeout:.1f}s")
            sleep(min(self.poll_interval, remaining))

    @property
    def current_url(self) -> str:
        return self.driver.current_url

    def title(self) -> str:
        return self.driver.title

    def page_source(self) -> str:
        return self.driver.page_source

    def pause(self, seconds: float) -> None:
        if seconds > 0:
            sleep(seconds)

    # queries

    def locate(self, strategy: SelectorStrategy, scope=None) -> list:
        """Returns every element matching one strategy, in document order."""

        root = self.driver if scope is None else scope
        if strategy.kind == "css":
            return root.find_elements(By.CSS_SELECTOR, strategy.matcher)
        if strategy.kind == "xpath":
            return root.find_elements(By.XPATH, scoped_xpath(strategy.matcher, scope))
        if strategy.kind == "test_id":
            return root.find_elements(By.CSS_SELECTOR, data_testid_selector(strategy.matcher))
        if strategy.kind == "role":
            selector, pattern = role_selector(strategy.matcher), strategy.name
        else:
            selector, pattern = "", strategy.matcher
        return self.driver.execute_script(LOCATE_SCRIPT, scope, strategy.kind, selector, pattern, MATCH_LIMIT) or []

    def is_visible(self, element) -> bool:
        try:
            if not element.is_displayed():
                return False
            size = element.size
        except (StaleElementReferenceException, NoSuchElementException):
            return False
        return size.get("width", 0) > 0 and size.get("height", 0) > 0

    def wait_for_visible(self, element, timeout: float) -> bool:
        return bool(wait_until(lambda: self.is_visible(element), timeout, self.poll_interval))

    def text_of(self, element) -> str:
        return (element.text or element.get_attribute("textContent") or "").strip()

    def bounding_box(self, element) -> dict[str, float] | None:
        try:
            rect = element.rect
        except StaleElementReferenceException:
            return None
        if not rect:
            return None
        return {key: float(rect.get(key, 0.0)) for key in ("x", "y", "width", "height")}

    # actions

    def click(self, element, timeout: float) -> None:
        ready = wait_until(
            lambda: self.is_visible(element) and element.is_enabled(),
            timeout,
            self.poll_interval,
        )
        if not ready:
            raise TimeoutException(f"Element was not clickable within {timeout:.1f}s")
        self.driver.execute_script("arguments[0].scrollIntoView({block: 'center'});", element)
        element.click()

    def fill(self, element, value: str, timeout: float) -> None:
        if not self.wait_for_visible(element, timeout):
            raise TimeoutException(f"Element was not visible for input within {timeout:.1f}s")
        element.clear()
        element.send_keys(value)

    # viewport and capture

    def set_viewport(self, width: int, height: int) -> None:
        if hasattr(self.driver, "execute_cdp_cmd"):
            self.driver.execute_cdp_cmd(
                "Emulation.setDeviceMetricsOverride",
                {"width": width, "height": height, "deviceScaleFactor": 0, "mobile": width < 768},
            )
            return
        self.driver.set_window_size(width, height)
        inner_width, inner_height = self.driver.execute_script(INNER_SIZE_SCRIPT)
        if (inner_width, inner_height) != (width, height):
            self.driver.set_window_size(width + (width - inner_width), height + (height - inner_height))

    def screenshot(self, path: str | Path, full_page: bool = True) -> Path:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        if full_page and hasattr(self.driver, "get_full_page_screenshot_as_file"):
            self.driver.get_full_page_screenshot_as_file(str(target))
        elif full_page and hasattr(self.driver, "execute_cdp_cmd"):
            width, height = self.driver.execute_script(PAGE_METRICS_SCRIPT)
            capture = self.driver.execute_cdp_cmd(
                "Page.captureScreenshot",
                {
                    "format": "png",
                    "captureBeyondViewport": True,
                    "clip": {"x": 0, "y": 0, "width": width, "height": height, "scale": 1},
                },
            )
            target.write_bytes(base64.b64decode(capture["data"]))
        else:
            self.driver.save_screenshot(str(target))
        log.debug("Saved screenshot %s", target)
        return target

    def close(self) -> None:
        self.driver.quit()


def scoped_xpath(expression: str, scope=None) -> str:
    """An absolute expression searched from an element still walks the whole document."""

    if scope is not None and expression.startswith("/"):
        return f".{expression}"
    return expression
