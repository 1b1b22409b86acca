# feedback_api/core/config.py
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="FFB_", env_file=".env", extra="ignore")

    # Paths
    repo_root: str = "."
    data_dir: str = "data"
    logs_dir: str = "logs"

    # stores/
    sqlite_path: str = "data/stores/feedback_forms.sqlite"

    # Logging
    log_path: str = "logs/api.jsonl"

    # Public links are built as <public_base_url>/form/<form_id>
    public_base_url: str = "http://127.0.0.1:5173"

    # -------------------------
    # Form authoring rules
    # -------------------------
    # A new form and an edited form have historically used different minimums
    # for multiple-choice options and different "required" defaults for new
    # questions. Both are kept, one setting per path.
    mc_min_options_create: int = 1
    mc_min_options_edit: int = 2
    required_default_create: bool = True
    required_default_edit: bool = False

    # Rating questions accept integers in [rating_min, rating_max]
    rating_min: int = 1
    rating_max: int = 5

    # Analytics
    trend_days: int = 7
    recent_forms_limit: int = 3

    # --- derived helpers ---
    def root_path(self) -> Path:
        return Path(self.repo_root).resolve()

    def data_path(self) -> Path:
        return (self.root_path() / self.data_dir).resolve()

    def logs_path(self) -> Path:
        return (self.root_path() / self.logs_dir).resolve()

    def abs_log_path(self) -> Path:
        return (self.root_path() / self.log_path).resolve()

    def abs_sqlite_path(self) -> Path:
        return (self.root_path() / self.sqlite_path).resolve()

    def min_options_for(self, path: str) -> int:
        return self.mc_min_options_edit if path == "edit" else self.mc_min_options_create

    def required_default_for(self, path: str) -> bool:
        return self.required_default_edit if path == "edit" else self.required_default_create


@lru_cache
def get_settings() -> Settings:
    return Settings()
