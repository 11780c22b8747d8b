from __future__ import annotations

import os
import re
from typing import Any, Mapping
from urllib.parse import urljoin

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from shopcheck.core.exceptions import ConfigurationError

STRATEGY_KINDS = {"role", "label", "placeholder", "css", "xpath", "text", "test_id"}
PATTERN_KINDS = {"label", "placeholder", "text"}


class SelectorStrategy(BaseModel):
    """One ranked way of locating an element; list position is its priority."""

    model_config = ConfigDict(frozen=True)

    kind: str
    matcher: str
    name: str | None = None

    @field_validator("kind")
    @classmethod
    def validate_kind(cls, value: str) -> str:
        normalized = value.lower().replace("-", "_")
        if normalized not in STRATEGY_KINDS:
            raise ValueError(f"Unsupported strategy kind: {value}")
        return normalized

    @model_validator(mode="after")
    def validate_patterns(self) -> "SelectorStrategy":
        patterns = []
        if self.kind in PATTERN_KINDS:
            patterns.append(self.matcher)
        if self.kind == "role" and self.name:
            patterns.append(self.name)
        for pattern in patterns:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ValueError(f"Invalid pattern {pattern!r}: {exc}") from exc
        return self

    def describe(self) -> str:
        if self.kind == "role" and self.name:
            return f"role={self.matcher}[name~/{self.name}/i]"
        return f"{self.kind}={self.matcher}"


class Viewport(BaseModel):
    width: int = Field(gt=0)
    height: int = Field(gt=0)


class RetryPolicy(BaseModel):
    ci: int = Field(default=2, ge=0)
    local: int = Field(default=0, ge=0)


def _default_viewports() -> dict[str, Viewport]:
    return {
        "desktop": Viewport(width=1920, height=1080),
        "mobile": Viewport(width=375, height=667),
    }


class EnvironmentConfig(BaseModel):
    base_url: str
    browser_matrix: list[str] = Field(default_factory=lambda: ["chrome"])
    device_profiles: list[str] = Field(default_factory=lambda: ["desktop"])
    headless: bool = True
    default_timeout_seconds: float = 10
    navigation_timeout_seconds: float = 30
    overlay_timeout_seconds: float = 1
    settle_delay_seconds: float = 1
    poll_interval_seconds: float = 0.2
    wait_until: str = "networkidle"
    viewports: dict[str, Viewport] = Field(default_factory=_default_viewports)
    retries: RetryPolicy = Field(default_factory=RetryPolicy)
    artifacts_dir: str = "reports"

    @field_validator("browser_matrix")
    @classmethod
    def validate_browsers(cls, value: list[str]) -> list[str]:
        allowed = {"chrome", "firefox"}
        normalized = [item.lower() for item in value]
        invalid = [item for item in normalized if item not in allowed]
        if invalid:
            raise ValueError(f"Unsupported browsers: {', '.join(invalid)}")
        return normalized

    @field_validator("wait_until")
    @classmethod
    def validate_wait_until(cls, value: str) -> str:
        normalized = value.lower()
        if normalized not in {"load", "domcontentloaded", "networkidle"}:
            raise ValueError("wait_until must be 'load', 'domcontentloaded' or 'networkidle'")
        return normalized

    @field_validator("viewports")
    @classmethod
    def validate_viewports(cls, value: dict[str, Viewport]) -> dict[str, Viewport]:
        merged = _default_viewports()
        merged.update(value)
        return merged

    @model_validator(mode="after")
    def validate_device_profiles(self) -> "EnvironmentConfig":
        missing = [profile for profile in self.device_profiles if profile not in self.viewports]
        if missing:
            raise ValueError(f"Device profiles without a viewport: {', '.join(missing)}")
        return self

    def viewport(self, profile: str) -> Viewport:
        try:
            return self.viewports[profile]
        except KeyError:
            raise ConfigurationError(f"Unknown device profile: {profile}") from None

    def retry_count(self, env: Mapping[str, str] | None = None) -> int:
        """Runner retries for live-site scenarios: more on CI, none locally."""

        environ = os.environ if env is None else env
        on_ci = environ.get("CI", "").lower() not in {"", "0", "false", "no"}
        return self.retries.ci if on_ci else self.retries.local


class PageUrls(BaseModel):
    landing: str
    product: str
    cart: str = "/cart"
    checkout: str = "/checkout"


class TestData(BaseModel):
    __test__ = False

    email: str = "test-automation@example.com"


class InteractionConfig(BaseModel):
    max_attempts: int = Field(default=3, ge=1)
    attempt_timeout_seconds: float = Field(default=5, gt=0)
    backoff_seconds: float = Field(default=1, ge=0)


class ElementDefinition(BaseModel):
    key: str
    intended_role: str = ""
    strategies: list[SelectorStrategy] = Field(default_factory=list)


class TestSuiteConfig(BaseModel):
    __test__ = False

    environment: EnvironmentConfig
    urls: PageUrls
    test_data: TestData = Field(default_factory=TestData)
    interaction: InteractionConfig = Field(default_factory=InteractionConfig)
    elements: list[ElementDefinition] = Field(default_factory=list)
    scenarios: dict[str, dict[str, Any]] = Field(default_factory=dict)

    def get_element(self, key: str) -> ElementDefinition:
        for element in self.elements:
            if element.key == key:
                return element
        raise ConfigurationError(f"Unknown element key: {key}")

    def strategies(self, key: str) -> tuple[SelectorStrategy, ...]:
        return tuple(self.get_element(key).strategies)

    def url(self, page: str) -> str:
        if page not in PageUrls.model_fields:
            raise ConfigurationError(f"Unknown page: {page}")
        value = getattr(self.urls, page)
        return urljoin(self.environment.base_url, value)

    def scenario_settings(self, name: str) -> dict[str, Any]:
        return self.scenarios.get(name, {})
