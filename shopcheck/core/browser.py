from __future__ import annotations

from selenium import webdriver
from selenium.common.exceptions import WebDriverException
from selenium.webdriver import ChromeOptions, FirefoxOptions

from shopcheck.config.schema import EnvironmentConfig
from shopcheck.core.page import SeleniumPage


class BrowserSession:
    """Creates browser instances using Selenium Manager."""

    def __init__(self, environment: EnvironmentConfig) -> None:
        self.environment = environment

    def start(self, browser_name: str, profile: str = "desktop"):
        viewport = self.environment.viewport(profile)
        normalized = browser_name.lower()
        if normalized == "chrome":
            options = ChromeOptions()
            if self.environment.headless:
                options.add_argument("--headless=new")
            options.add_argument(f"--window-size={viewport.width},{viewport.height}")
            driver = webdriver.Chrome(options=options)
        elif normalized == "firefox":
            options = FirefoxOptions()
            if self.environment.headless:
                options.add_argument("-headless")
            options.add_argument(f"--width={viewport.width}")
            options.add_argument(f"--height={viewport.height}")
            driver = webdriver.Firefox(options=options)
        else:
            raise ValueError(f"Unsupported browser: {browser_name}")
        driver.set_page_load_timeout(self.environment.navigation_timeout_seconds)
        driver.implicitly_wait(0)
        return driver

    def open_page(self, browser_name: str, profile: str = "desktop") -> SeleniumPage:
        driver = self.start(browser_name, profile)
        page = SeleniumPage(driver, poll_interval=self.environment.poll_interval_seconds)
        viewport = self.environment.viewport(profile)
        try:
            page.set_viewport(viewport.width, viewport.height)
        except WebDriverException:
            driver.quit()
            raise
        return page
