from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from time import monotonic, sleep
from typing import Sequence

from selenium.common.exceptions import WebDriverException

from shopcheck.config.schema import SelectorStrategy
from shopcheck.core.exceptions import SignalTimeout
from shopcheck.core.finder import ElementResolver

log = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class SuccessSignal:
    """One independent condition showing that an action worked."""

    name: str
    kind: str
    pattern: str = ""
    target: str | tuple[SelectorStrategy, ...] = ()
    timeout: float | None = None

    @classmethod
    def text(cls, name: str, pattern: str, timeout: float | None = None) -> "SuccessSignal":
        return cls(name, "text", pattern=pattern, target=(SelectorStrategy(kind="text", matcher=pattern),), timeout=timeout)

    @classmethod
    def url(cls, name: str, pattern: str, timeout: float | None = None) -> "SuccessSignal":
        re.compile(pattern)
        return cls(name, "url", pattern=pattern, timeout=timeout)

    @classmethod
    def element(cls, name: str, target, timeout: float | None = None) -> "SuccessSignal":
        if not isinstance(target, str):
            target = tuple(target)
        return cls(name, "element", target=target, timeout=timeout)


@dataclass(slots=True)
class SignalOutcome:
    signals: tuple[SuccessSignal, ...]
    satisfied: SuccessSignal | None = None
    element: object = None
    elapsed: float = 0.0
    timed_out: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.satisfied is not None

    def require(self) -> SuccessSignal:
        if self.satisfied is None:
            names = ", ".join(signal.name for signal in self.signals)
            raise SignalTimeout(f"No success signal fired after {self.elapsed:.1f}s: {names}")
        return self.satisfied


class OutcomeSignalResolver:
    """Races success signals; the first one satisfied decides the outcome.

    All pending signals are polled on every tick in list order. A signal drops
    out of the race when its own timeout passes, and the race is lost only once
    every signal has dropped out.
    """

    def __init__(self, page, resolver: ElementResolver) -> None:
        self.page = page
        self.resolver = resolver
        self.default_timeout = resolver.suite_config.environment.default_timeout_seconds
        self.poll_interval = resolver.suite_config.environment.poll_interval_seconds

    def await_any(self, signals: Sequence[SuccessSignal], timeout: float | None = None) -> SignalOutcome:
        if not signals:
            raise ValueError("await_any needs at least one signal")
        started = monotonic()
        outcome = SignalOutcome(tuple(signals))
        pending = []
        for signal in signals:
            budget = signal.timeout if signal.timeout is not None else timeout
            budget = self.default_timeout if budget is None else budget
            pending.append((signal, started + budget))
        while pending:
            for signal, _deadline in pending:
                element = self._check(signal)
                if element is not None:
                    outcome.satisfied = signal
                    outcome.element = element if signal.kind != "url" else None
                    outcome.elapsed = monotonic() - started
                    log.debug("Signal %r fired after %.2fs", signal.name, outcome.elapsed)
                    return outcome
            now = monotonic()
            for signal, deadline in pending:
                if deadline <= now:
                    outcome.timed_out.append(signal.name)
            pending = [(signal, deadline) for signal, deadline in pending if deadline > now]
            if pending:
                nearest = min(deadline for _signal, deadline in pending)
                sleep(min(self.poll_interval, nearest - now))
        outcome.elapsed = monotonic() - started
        return outcome

    def _check(self, signal: SuccessSignal):
        """Returns a truthy marker (the element for DOM signals) when satisfied."""

        try:
            if signal.kind == "url":
                return True if re.search(signal.pattern, self.page.current_url, re.IGNORECASE) else None
            resolution = self.resolver.probe(signal.target)
            return resolution.element if resolution.found else None
        except WebDriverException as exc:
            log.debug("Signal %r check failed: %s", signal.name, exc)
            return None
