"""Configuration and constants for TweetCurator."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

# Paths
PROJECT_ROOT = Path(__file__).parent.parent.parent
DEFAULT_DATA_DIR = PROJECT_ROOT / "data"
DEFAULT_DB_PATH = DEFAULT_DATA_DIR / "tweets.db"
DEFAULT_ARCHIVE_DIR = PROJECT_ROOT / "twitter_archive" / "data"

# Optional local settings file
CONFIG_JSON_PATH = PROJECT_ROOT / "curator.json"

# Archive owner (used for self-reply thread detection and tweet URLs)
DEFAULT_USERNAME = "me"

MODEL_DEFAULT = "claude-sonnet-4-20250514"

# Listing defaults
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 50
SWIPE_QUEUE_DEFAULT_LIMIT = 10

SORT_COLUMNS = [
    "created_at",
    "favorite_count",
    "retweet_count",
    "char_count",
    "ai_quality_score",
]
DEFAULT_SORT = "created_at"

# LLM calls
LLM_TIMEOUT_SECONDS = 600
LLM_MAX_TOKENS = 4096

# LLM tagging
LLM_TAG_BATCH_SIZE = 20
LLM_TAG_DELAY_SECONDS = 2.0


@dataclass
class CuratorConfig:
    """Settings for one local archive."""

    db_path: Path = field(default_factory=lambda: DEFAULT_DB_PATH)
    username: str = DEFAULT_USERNAME
    archive_dir: Path = field(default_factory=lambda: DEFAULT_ARCHIVE_DIR)
    model: str = MODEL_DEFAULT
    llm_timeout: int = LLM_TIMEOUT_SECONDS
    llm_max_tokens: int = LLM_MAX_TOKENS

    @property
    def exports_dir(self) -> Path:
        return self.db_path.parent / "exports"

    def ensure_dirs(self):
        """Create the data directory if it doesn't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)


def _load_settings() -> dict:
    """Load curator.json if present."""
    if CONFIG_JSON_PATH.exists():
        return json.loads(CONFIG_JSON_PATH.read_text())
    return {}


def _resolve(path_value: str) -> Path:
    path = Path(path_value).expanduser()
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    return path


def load_config() -> CuratorConfig:
    """Build the active config: defaults, then curator.json, then env vars."""
    settings = _load_settings()
    config = CuratorConfig()

    if settings.get("db_path"):
        config.db_path = _resolve(settings["db_path"])
    if settings.get("archive_dir"):
        config.archive_dir = _resolve(settings["archive_dir"])
    if settings.get("username"):
        config.username = settings["username"]
    if settings.get("model"):
        config.model = settings["model"]
    if settings.get("llm_timeout"):
        config.llm_timeout = int(settings["llm_timeout"])
    if settings.get("llm_max_tokens"):
        config.llm_max_tokens = int(settings["llm_max_tokens"])

    env_db = os.environ.get("TWEETCURATOR_DB")
    if env_db:
        config.db_path = _resolve(env_db)
    env_user = os.environ.get("TWEETCURATOR_USERNAME")
    if env_user:
        config.username = env_user

    return config


def save_config(config: CuratorConfig):
    """Persist the current settings to curator.json."""
    data = {
        "db_path": str(config.db_path),
        "archive_dir": str(config.archive_dir),
        "username": config.username,
        "model": config.model,
        "llm_timeout": config.llm_timeout,
        "llm_max_tokens": config.llm_max_tokens,
    }
    CONFIG_JSON_PATH.write_text(json.dumps(data, indent=2) + "\n")
