from __future__ import annotations

from pathlib import Path

import pytest

from shopcheck.config.loader import ConfigLoader
from shopcheck.core.runtime import build_runtime
from shopcheck.logging.artifacts import ArtifactManager
from tests.fakes import FakeClock, FakePage

PROJECT_ROOT = Path(__file__).resolve().parents[1]
CONFIG_PATH = ConfigLoader.resolve_path()
CLOCKED_MODULES = (
    "shopcheck.core.finder",
    "shopcheck.core.signals",
    "shopcheck.core.actions",
    "shopcheck.core.page",
    "shopcheck.utils.wait",
)


def pytest_generate_tests(metafunc):
    if "browser_name" not in metafunc.fixturenames and "device_profile" not in metafunc.fixturenames:
        return
    environment = ConfigLoader.load(CONFIG_PATH).environment
    if "browser_name" in metafunc.fixturenames:
        metafunc.parametrize("browser_name", environment.browser_matrix)
    if "device_profile" in metafunc.fixturenames:
        metafunc.parametrize("device_profile", environment.device_profiles)


def pytest_collection_modifyitems(config, items):
    reruns = ConfigLoader.load(CONFIG_PATH).environment.retry_count()
    if not reruns:
        return
    for item in items:
        if item.get_closest_marker("integration"):
            item.add_marker(pytest.mark.flaky(reruns=reruns, reruns_delay=1))


@pytest.fixture(scope="session", autouse=True)
def reset_artifacts_for_test_run():
    suite = ConfigLoader.load(CONFIG_PATH)
    manager = ArtifactManager(PROJECT_ROOT / suite.environment.artifacts_dir)
    manager.reset()
    return manager


@pytest.fixture()
def suite_config():
    return ConfigLoader.load(CONFIG_PATH)


@pytest.fixture()
def fake_clock(monkeypatch):
    clock = FakeClock()
    for module in CLOCKED_MODULES:
        monkeypatch.setattr(f"{module}.sleep", clock.sleep, raising=False)
        monkeypatch.setattr(f"{module}.monotonic", clock.monotonic, raising=False)
    return clock


@pytest.fixture()
def fake_page(fake_clock):
    return FakePage(fake_clock)


@pytest.fixture()
def runtime(fake_page, suite_config, tmp_path):
    return build_runtime(fake_page, suite_config, artifacts_root=tmp_path / "reports")
