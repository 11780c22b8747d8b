from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator
from urllib import error, request

import pytest
from selenium.common.exceptions import WebDriverException

from shopcheck.core.browser import BrowserSession
from shopcheck.core.runtime import StorefrontRuntime, build_runtime

log = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def require_reachable_base_url(suite_config) -> None:
    try:
        with request.urlopen(suite_config.environment.base_url, timeout=5):
            return
    except error.HTTPError:
        return
    except (error.URLError, TimeoutError) as exc:
        pytest.skip(f"Storefront is not reachable at {suite_config.environment.base_url}: {exc}")


@contextmanager
def managed_runtime(
    suite_config,
    browser_name: str,
    test_name: str,
    device_profile: str = "desktop",
) -> Iterator[StorefrontRuntime]:
    browser_session = BrowserSession(suite_config.environment)
    try:
        page = browser_session.open_page(browser_name, device_profile)
    except WebDriverException as exc:
        pytest.skip(f"WebDriver could not start for {browser_name}: {exc}")
    artifacts_root = PROJECT_ROOT / suite_config.environment.artifacts_dir
    runtime = build_runtime(
        page,
        suite_config,
        artifacts_root=artifacts_root,
        browser_name=browser_name,
        device_profile=device_profile,
    )
    try:
        yield runtime
    except Exception:
        capture_failure_artifacts(runtime, f"{test_name}-{browser_name}-{device_profile}")
        raise
    finally:
        page.close()


def capture_failure_artifacts(runtime: StorefrontRuntime, name: str) -> None:
    manager = runtime.artifact_manager
    stamp = manager.timestamp()
    try:
        runtime.page.screenshot(manager.failure_screenshot_path(name, stamp), full_page=True)
        manager.write_dom_snapshot(name, runtime.page.page_source(), stamp)
    except WebDriverException as exc:
        log.warning("Could not capture failure artifacts for %s: %s", name, exc)
