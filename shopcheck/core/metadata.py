from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from shopcheck.config.schema import SelectorStrategy
from shopcheck.core.exceptions import ResolutionTimeout

narration_log = logging.getLogger("shopcheck.scenarios")


class ResolutionStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    TIMED_OUT = "timed_out"


@dataclass(slots=True, frozen=True)
class Resolution:
    target: str
    status: ResolutionStatus
    strategies: tuple[SelectorStrategy, ...] = ()
    element: Any = None
    strategy: SelectorStrategy | None = None
    elapsed: float = 0.0

    @property
    def found(self) -> bool:
        return self.status is ResolutionStatus.PRESENT

    def require(self) -> Any:
        if self.found:
            return self.element
        tried = ", ".join(item.describe() for item in self.strategies) or "no strategies"
        raise ResolutionTimeout(
            f"{self.target} was not visible after {self.elapsed:.1f}s ({self.status.value}); tried {tried}"
        )


@dataclass(slots=True, frozen=True)
class RetryBudget:
    max_attempts: int = 3
    attempt_timeout: float = 5.0
    backoff: float = 1.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")


@dataclass(slots=True, frozen=True)
class ActionOutcome:
    action: str
    target: str
    attempts: int
    settled_early: bool = False


@dataclass(slots=True)
class ScenarioResult:
    name: str
    browser: str = ""
    device_profile: str = "desktop"
    passed: bool | None = None
    narration: list[str] = field(default_factory=list)
    artifacts: list[Path] = field(default_factory=list)
    error: str | None = None
    error_type: str | None = None
    started_at: float = field(default_factory=time.monotonic)
    duration_seconds: float = 0.0

    def narrate(self, message: str) -> None:
        self.narration.append(message)
        narration_log.info("[%s] %s", self.name, message)

    def add_artifact(self, path: Path) -> None:
        self.artifacts.append(Path(path))

    def finish(self, passed: bool, error: BaseException | None = None) -> "ScenarioResult":
        self.passed = passed
        if error is not None:
            self.error = str(error)
            self.error_type = type(error).__name__
        self.duration_seconds = round(time.monotonic() - self.started_at, 3)
        return self
