from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass
class Config:
    secret_key: str = "change-me"
    tasks_file: str | None = None  # None -> <instance_path>/tasks.json
    default_locale: str = "en"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Config:
        return cls(
            secret_key=os.getenv("SECRET_KEY", "change-me"),
            tasks_file=os.getenv("TASKS_FILE") or None,
            default_locale=os.getenv("DEFAULT_LOCALE", "en").strip().lower() or "en",
            log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
        )

    def override(self, d: dict):
        for k, v in d.items():
            if hasattr(self, k):
                setattr(self, k, v)

    def to_flask_dict(self):
        return {
            "SECRET_KEY": self.secret_key,
            "TASKS_FILE": self.tasks_file,
            "DEFAULT_LOCALE": self.default_locale,
            "LOG_LEVEL": self.log_level,
        }
