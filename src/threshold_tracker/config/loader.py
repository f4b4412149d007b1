"""Config loader — reads YAML, applies environment overrides."""

from __future__ import annotations

import os
from pathlib import Path

import yaml

from threshold_tracker.config.schema import AppConfig

# env var -> (section, key)
_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "PROPOSAL_PUBKEY": ("proposal", "pubkey"),
    "SOLANA_RPC_URL": ("sources", "rpc_url"),
    "TELEGRAM_BOT_TOKEN": ("telegram", "bot_token"),
    "TELEGRAM_CHAT_ID": ("telegram", "chat_id"),
    "TRACKER_HISTORY_PATH": ("history", "path"),
    "TRACKER_DATABASE_URL": ("history", "database_url"),
    "TRACKER_LOG_LEVEL": ("logging", "level"),
    "TRACKER_LOG_FORMAT": ("logging", "format"),
}


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from a YAML file, then apply env var overrides.

    If *path* is None or the file doesn't exist, returns defaults.

    Environment variable overrides:
        PROPOSAL_PUBKEY       -> proposal.pubkey
        SOLANA_RPC_URL        -> sources.rpc_url
        TELEGRAM_BOT_TOKEN    -> telegram.bot_token
        TELEGRAM_CHAT_ID      -> telegram.chat_id
        TRACKER_HISTORY_PATH  -> history.path
        TRACKER_DATABASE_URL  -> history.database_url
        TRACKER_LOG_LEVEL     -> logging.level
        TRACKER_LOG_FORMAT    -> logging.format
    """
    data: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p) as f:
                data = yaml.safe_load(f) or {}

    for env_name, (section, key) in _ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            data.setdefault(section, {})[key] = value

    return AppConfig.model_validate(data)
