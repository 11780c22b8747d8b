from __future__ import annotations

import re
import shutil
from datetime import UTC, datetime
from pathlib import Path


class ArtifactManager:
    """Creates and manages the report directory and its files."""

    def __init__(self, root: str | Path = "reports") -> None:
        self.root = Path(root)
        self.screenshot_root = self.root / "screenshots"
        self.failure_root = self.root / "failures"
        self.dom_root = self.root / "dom_snapshots"
        self.run_log_root = self.root / "run_logs"
        self._ensure_structure()

    def _ensure_structure(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        for directory in self._directories():
            directory.mkdir(parents=True, exist_ok=True)

    def _directories(self) -> tuple[Path, ...]:
        return (self.screenshot_root, self.failure_root, self.dom_root, self.run_log_root)

    @staticmethod
    def timestamp() -> str:
        return datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")

    @staticmethod
    def slug(name: str) -> str:
        return re.sub(r"[^A-Za-z0-9_.-]+", "_", name).strip("_") or "scenario"

    def screenshot_path(self, filename: str, device_profile: str = "desktop") -> Path:
        """Scenario screenshots keep fixed names so reruns overwrite them.

        Desktop captures sit directly in ``screenshots/``; other device profiles get
        their own subdirectory so they never overwrite the desktop ones.
        """

        if device_profile == "desktop":
            return self.screenshot_root / filename
        directory = self.screenshot_root / self.slug(device_profile)
        directory.mkdir(parents=True, exist_ok=True)
        return directory / filename

    def failure_screenshot_path(self, name: str, timestamp: str | None = None) -> Path:
        stamp = timestamp or self.timestamp()
        return self.failure_root / f"{stamp}_{self.slug(name)}.png"

    def write_dom_snapshot(self, name: str, page_source: str, timestamp: str | None = None) -> Path:
        stamp = timestamp or self.timestamp()
        path = self.dom_root / f"{stamp}_{self.slug(name)}.html"
        path.write_text(page_source, encoding="utf-8")
        return path

    def write_run_log(self, name: str, lines: list[str]) -> Path:
        path = self.run_log_root / f"{self.slug(name)}.log"
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    def reset(self) -> Path:
        self._ensure_structure()
        for child in self.root.iterdir():
            if child.is_file() and child.name != ".gitkeep":
                child.unlink()
        for directory in self._directories():
            self._clear_directory(directory)
        return self.root

    @staticmethod
    def _clear_directory(directory: Path) -> None:
        for child in directory.iterdir():
            if child.is_dir():
                shutil.rmtree(child)
            elif child.is_file() and child.name != ".gitkeep":
                child.unlink()
