from __future__ import annotations

import logging
from time import sleep
from typing import Callable

from selenium.common.exceptions import WebDriverException

from shopcheck.core.exceptions import ResolutionTimeout
from shopcheck.core.finder import ElementResolver
from shopcheck.core.metadata import ActionOutcome, Resolution, RetryBudget

log = logging.getLogger(__name__)

RETRYABLE_ERRORS = (WebDriverException, ResolutionTimeout)


class InteractionGuard:
    """Clicks and fills routed through a bounded retry budget.

    A failed attempt is counted and retried after a fixed backoff; once the budget
    is spent the last attempt's error is raised unchanged. Clicks are not
    idempotent, so callers can pass ``settled`` to check the action's observable
    effect before each retry.
    """

    def __init__(self, page, resolver: ElementResolver, budget: RetryBudget) -> None:
        self.page = page
        self.resolver = resolver
        self.budget = budget

    @classmethod
    def from_config(cls, page, resolver: ElementResolver) -> "InteractionGuard":
        interaction = resolver.suite_config.interaction
        budget = RetryBudget(
            max_attempts=interaction.max_attempts,
            attempt_timeout=interaction.attempt_timeout_seconds,
            backoff=interaction.backoff_seconds,
        )
        return cls(page, resolver, budget)

    def click(self, target, budget: RetryBudget | None = None, settled: Callable[[], bool] | None = None) -> ActionOutcome:
        return self.act(target, "click", budget=budget, settled=settled)

    def fill(self, target, value: str, budget: RetryBudget | None = None) -> ActionOutcome:
        return self.act(target, "fill", value=value, budget=budget)

    def act(
        self,
        target,
        action: str,
        value: str | None = None,
        budget: RetryBudget | None = None,
        settled: Callable[[], bool] | None = None,
    ) -> ActionOutcome:
        if action not in {"click", "fill"}:
            raise ValueError(f"Unsupported action: {action}")
        if action == "fill" and value is None:
            raise ValueError("fill requires a value")
        budget = budget or self.budget
        label = self._label(target)
        last_error: Exception | None = None
        for attempt in range(1, budget.max_attempts + 1):
            if attempt > 1:
                sleep(budget.backoff)
                if settled is not None and settled():
                    log.info("%s on %s already took effect; not repeating it", action, label)
                    return ActionOutcome(action, label, attempt - 1, settled_early=True)
            try:
                element = self._element(target, attempt, budget)
                if action == "click":
                    self.page.click(element, budget.attempt_timeout)
                else:
                    self.page.fill(element, value, budget.attempt_timeout)
                return ActionOutcome(action, label, attempt)
            except RETRYABLE_ERRORS as exc:
                last_error = exc
                log.debug("%s on %s failed (attempt %d/%d): %s", action, label, attempt, budget.max_attempts, exc)
        raise last_error

    def _element(self, target, attempt: int, budget: RetryBudget):
        if isinstance(target, Resolution):
            if attempt == 1 and target.found:
                return target.element
            return self.resolver.find(target.strategies, timeout=budget.attempt_timeout).require()
        if isinstance(target, (str, list, tuple)):
            return self.resolver.find(target, timeout=budget.attempt_timeout).require()
        return target

    @staticmethod
    def _label(target) -> str:
        if isinstance(target, Resolution):
            return target.target
        if isinstance(target, str):
            return target
        if isinstance(target, (list, tuple)):
            return " | ".join(item.describe() for item in target)
        return "element"
