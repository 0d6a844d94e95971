"""
Configuration loader for the engine.

Loads engine settings from a taskflow.env file. A missing file means defaults.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from . import envparse

logger = logging.getLogger(__name__)

VALID_MOVE_FAILURE_POLICIES = ("commit", "discard")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class EngineConfig:
    """Engine settings from taskflow.env"""
    board_file: Path  # YAML board the CLI reads and writes
    automation_cache_ttl: float  # Seconds active automations stay cached
    move_failure_policy: str  # "commit" or "discard" earlier updates when move_task fails
    log_level: str


def load_engine_config(env_path: Path) -> EngineConfig:
    """Load taskflow.env and return EngineConfig.

    Relative BOARD_FILE paths resolve against the env file's directory.
    """
    env = envparse.load_env(str(env_path)) if env_path.exists() else {}

    policy = env.get("MOVE_FAILURE_POLICY", "commit").lower()
    if policy not in VALID_MOVE_FAILURE_POLICIES:
        logger.warning(f"Unknown MOVE_FAILURE_POLICY '{policy}', using 'commit'")
        policy = "commit"

    raw_ttl = env.get("AUTOMATION_CACHE_TTL", "5")
    try:
        ttl = float(raw_ttl)
    except ValueError:
        logger.warning(f"Invalid AUTOMATION_CACHE_TTL '{raw_ttl}', using 5")
        ttl = 5.0
    if ttl < 0:
        logger.warning(f"Negative AUTOMATION_CACHE_TTL '{raw_ttl}', caching disabled")
        ttl = 0.0

    log_level = env.get("LOG_LEVEL", "INFO").upper()
    if log_level not in VALID_LOG_LEVELS:
        logger.warning(f"Unknown LOG_LEVEL '{log_level}', using INFO")
        log_level = "INFO"

    board_file = Path(env.get("BOARD_FILE", "board.yaml"))
    if not board_file.is_absolute():
        board_file = env_path.parent / board_file

    return EngineConfig(
        board_file=board_file,
        automation_cache_ttl=ttl,
        move_failure_policy=policy,
        log_level=log_level,
    )
