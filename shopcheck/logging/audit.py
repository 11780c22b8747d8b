from __future__ import annotations

import json
from pathlib import Path

from shopcheck.core.metadata import ScenarioResult


class ScenarioAuditLogger:
    """Appends one JSON line per scenario run."""

    def __init__(self, root: str | Path = "reports") -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self.results_path = self.root / "scenario_results.jsonl"

    def write(self, result: ScenarioResult) -> None:
        payload = {
            "scenario": result.name,
            "browser": result.browser,
            "device_profile": result.device_profile,
            "passed": result.passed,
            "duration_seconds": result.duration_seconds,
            "narration": result.narration,
            "artifacts": [str(path) for path in result.artifacts],
            "error_type": result.error_type,
            "error": result.error,
        }
        with self.results_path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(payload) + "\n")

    def read_results(self) -> list[dict]:
        if not self.results_path.exists():
            return []
        with self.results_path.open("r", encoding="utf-8") as handle:
            return [json.loads(line) for line in handle if line.strip()]
