from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.json"

DEFAULTS = {
    "db_path": "progress.db",
    "progress_slot": "learningProgress",
    "quiz_seconds": 300,
    "tick_interval": 1.0,
    "current_week": 1,
    "theme_id": "",
    "language": "en",
    "private_mode": False,
}


@dataclass
class Settings:
    db_path: str = DEFAULTS["db_path"]
    progress_slot: str = DEFAULTS["progress_slot"]
    quiz_seconds: int = DEFAULTS["quiz_seconds"]
    tick_interval: float = DEFAULTS["tick_interval"]
    current_week: int = DEFAULTS["current_week"]
    theme_id: str = DEFAULTS["theme_id"]  # "" = theme of the week
    language: str = DEFAULTS["language"]
    private_mode: bool = DEFAULTS["private_mode"]

    @property
    def project_root(self) -> Path:
        return Path(__file__).resolve().parent.parent

    @property
    def db_full_path(self) -> Path:
        return self.project_root / self.db_path

    def to_dict(self) -> dict:
        return {
            "db_path": self.db_path,
            "progress_slot": self.progress_slot,
            "quiz_seconds": self.quiz_seconds,
            "tick_interval": self.tick_interval,
            "current_week": self.current_week,
            "theme_id": self.theme_id,
            "language": self.language,
            "private_mode": self.private_mode,
        }


def load_settings() -> Settings:
    if CONFIG_PATH.exists():
        raw = json.loads(CONFIG_PATH.read_text())
        known = {f.name for f in Settings.__dataclass_fields__.values()}
        filtered = {k: v for k, v in raw.items() if k in known}
        return Settings(**filtered)
    return Settings()


def save_settings(settings: Settings) -> None:
    CONFIG_PATH.write_text(json.dumps(settings.to_dict(), indent=4) + "\n")
