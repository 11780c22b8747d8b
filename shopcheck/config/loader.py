from __future__ import annotations

import json
import os
from pathlib import Path

from shopcheck.config.schema import TestSuiteConfig

CONFIG_ENV_VAR = "SHOPCHECK_CONFIG"
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "test_suite.json"


class ConfigLoader:
    """Loads and validates the JSON test suite configuration."""

    @staticmethod
    def resolve_path(path: str | Path | None = None, env: dict[str, str] | None = None) -> Path:
        """An explicit path wins, then ``SHOPCHECK_CONFIG``, then the bundled config."""

        if path is not None:
            return Path(path)
        source = os.environ if env is None else env
        override = source.get(CONFIG_ENV_VAR)
        return Path(override) if override else DEFAULT_CONFIG_PATH

    @classmethod
    def load(cls, path: str | Path | None = None) -> TestSuiteConfig:
        config_path = cls.resolve_path(path)
        with config_path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        return TestSuiteConfig.model_validate(payload)
