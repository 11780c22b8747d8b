from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from shopcheck.config.schema import TestSuiteConfig
from shopcheck.core.actions import InteractionGuard
from shopcheck.core.finder import ElementResolver
from shopcheck.core.overlays import TransientOverlayHandler
from shopcheck.core.signals import OutcomeSignalResolver
from shopcheck.logging.artifacts import ArtifactManager
from shopcheck.logging.audit import ScenarioAuditLogger


@dataclass(slots=True)
class StorefrontRuntime:
    page: object
    suite_config: TestSuiteConfig
    artifact_manager: ArtifactManager
    audit_logger: ScenarioAuditLogger
    resolver: ElementResolver
    guard: InteractionGuard
    overlays: TransientOverlayHandler
    signals: OutcomeSignalResolver
    browser_name: str = "chrome"
    device_profile: str = "desktop"


def build_runtime(
    page,
    suite_config: TestSuiteConfig,
    artifacts_root: str | Path | None = None,
    browser_name: str = "chrome",
    device_profile: str = "desktop",
) -> StorefrontRuntime:
    """Wires the resolver, guard, overlay and signal layers around one page."""

    root = artifacts_root or suite_config.environment.artifacts_dir
    resolver = ElementResolver(page, suite_config)
    return StorefrontRuntime(
        page=page,
        suite_config=suite_config,
        artifact_manager=ArtifactManager(root),
        audit_logger=ScenarioAuditLogger(root),
        resolver=resolver,
        guard=InteractionGuard.from_config(page, resolver),
        overlays=TransientOverlayHandler(page, resolver),
        signals=OutcomeSignalResolver(page, resolver),
        browser_name=browser_name,
        device_profile=device_profile,
    )
