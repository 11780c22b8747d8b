from __future__ import annotations

import logging
from time import monotonic, sleep
from typing import Sequence, Union

from selenium.common.exceptions import WebDriverException

from shopcheck.config.schema import SelectorStrategy, TestSuiteConfig
from shopcheck.core.metadata import Resolution, ResolutionStatus

log = logging.getLogger(__name__)

Target = Union[str, Sequence[SelectorStrategy]]


class ElementResolver:
    """Resolves an ordered strategy list to the first visible element.

    Every poll scans the strategies in list order and stops at the first one with
    a visible match, so an earlier strategy always beats a later one when both
    match. Nothing is cached between calls.
    """

    def __init__(self, page, suite_config: TestSuiteConfig) -> None:
        self.page = page
        self.suite_config = suite_config
        self.default_timeout = suite_config.environment.default_timeout_seconds
        self.poll_interval = suite_config.environment.poll_interval_seconds

    def find(self, target: Target, timeout: float | None = None, scope=None) -> Resolution:
        label, strategies = self._strategies(target)
        started = monotonic()
        if not strategies:
            return Resolution(label, ResolutionStatus.ABSENT, strategies)
        duration = self.default_timeout if timeout is None else timeout
        deadline = started + duration
        while True:
            hit = self._first_visible(strategies, scope)
            if hit is not None:
                strategy, element = hit
                log.debug("Resolved %s via %s", label, strategy.describe())
                return Resolution(label, ResolutionStatus.PRESENT, strategies, element, strategy, monotonic() - started)
            remaining = deadline - monotonic()
            if remaining <= 0:
                break
            sleep(min(self.poll_interval, remaining))
        status = ResolutionStatus.TIMED_OUT if duration > 0 else ResolutionStatus.ABSENT
        log.debug("Could not resolve %s within %.1fs", label, duration)
        return Resolution(label, status, strategies, elapsed=monotonic() - started)

    def probe(self, target: Target, scope=None) -> Resolution:
        """Single scan with no waiting; a miss is reported as ABSENT."""

        return self.find(target, timeout=0, scope=scope)

    def _first_visible(self, strategies: tuple[SelectorStrategy, ...], scope):
        for strategy in strategies:
            try:
                matches = self.page.locate(strategy, scope)
                for element in matches:
                    if self.page.is_visible(element):
                        return strategy, element
            except WebDriverException as exc:
                log.debug("Strategy %s failed: %s", strategy.describe(), exc.msg or type(exc).__name__)
        return None

    def _strategies(self, target: Target) -> tuple[str, tuple[SelectorStrategy, ...]]:
        if isinstance(target, str):
            return target, self.suite_config.strategies(target)
        strategies = tuple(target)
        label = " | ".join(item.describe() for item in strategies) or "<empty>"
        return label, strategies
