"""
Configuration for dicebag.

Every setting comes from an environment variable with a default; a ``.env``
file (explicit path, or one at the repository root) is read first through
python-dotenv. Variables already set in the environment win over the file.

    HOST, PORT, DEBUG            dev server
    LOG_LEVEL, LOG_FILE          logging
    DICE_SEED                    replay every roll from a fixed seed
    MAX_DICE, MAX_BATCH_COUNT    roller limits
    MAX_BREAKDOWN_LENGTH         clip long roll listings
    BREAKDOWN_STYLE              markdown, plain or html
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

BREAKDOWN_STYLES = ('markdown', 'plain', 'html')
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

DEFAULT_ENV_FILE = Path(__file__).resolve().parent.parent.parent / '.env'


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ('true', '1', 'yes')


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, '').strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{raw}'") from None


def _env_optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name, '').strip()
    if not raw:
        return None
    return _env_int(name, 0)


class Config:
    """
    dicebag settings.

    Example:
        config = Config()
        roller = DiceRoller.from_config(config)
    """

    def __init__(self, env_file: Optional[str] = None):
        """
        Args:
            env_file: Path to a .env file. Defaults to ``.env`` at the
                      repository root when one exists.

        Raises:
            ValueError: If a numeric variable is not an integer
        """
        self._load_env_file(env_file)

        # Server
        self.host = os.getenv('HOST', '127.0.0.1')
        self.port = _env_int('PORT', 5000)
        self.debug = _env_bool('DEBUG')

        # Logging
        self.log_level = os.getenv('LOG_LEVEL', 'INFO').strip().upper() or 'INFO'
        self.log_file = os.getenv('LOG_FILE') or None

        # Roller
        self.dice_seed = _env_optional_int('DICE_SEED')
        self.max_dice = _env_int('MAX_DICE', 1000)
        self.max_batch_count = _env_int('MAX_BATCH_COUNT', 100)

        # Breakdown display
        self.max_breakdown_length = _env_int('MAX_BREAKDOWN_LENGTH', 1024)
        self.breakdown_style = os.getenv('BREAKDOWN_STYLE', 'markdown').strip().lower() or 'markdown'

    @staticmethod
    def _load_env_file(env_file: Optional[str]) -> None:
        path = Path(env_file) if env_file else DEFAULT_ENV_FILE
        if path.exists():
            load_dotenv(path)
            logger.info(f"Loaded configuration from {path}")
        elif env_file:
            logger.warning(f"Configuration file {path} not found")

    def problems(self) -> List[str]:
        """Describe every unusable setting; empty when the config is valid."""
        problems = []

        if self.log_level not in LOG_LEVELS:
            problems.append(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {self.log_level}")
        if self.max_dice < 1:
            problems.append(f"MAX_DICE must be at least 1, got {self.max_dice}")
        if self.max_batch_count < 2:
            problems.append(f"MAX_BATCH_COUNT must be at least 2, got {self.max_batch_count}")
        if self.max_breakdown_length < 1:
            problems.append(f"MAX_BREAKDOWN_LENGTH must be positive, got {self.max_breakdown_length}")
        if self.breakdown_style not in BREAKDOWN_STYLES:
            problems.append(
                f"BREAKDOWN_STYLE must be one of {', '.join(BREAKDOWN_STYLES)}, "
                f"got {self.breakdown_style}"
            )
        return problems

    def validate(self) -> bool:
        """
        Check the settings and log each problem.

        Returns:
            True if every setting is usable
        """
        problems = self.problems()
        for problem in problems:
            logger.error(f"Invalid configuration: {problem}")

        if self.dice_seed is not None and not self.debug:
            logger.warning("DICE_SEED is set outside debug mode; every restart replays the same rolls")

        return not problems

    def __repr__(self) -> str:
        return (
            f"Config(host={self.host}, port={self.port}, debug={self.debug}, "
            f"max_dice={self.max_dice}, max_batch_count={self.max_batch_count}, "
            f"breakdown_style={self.breakdown_style}, seeded={self.dice_seed is not None})"
        )


_config: Optional[Config] = None


def get_config() -> Config:
    """Return the process-wide Config, loading and validating it on first use."""
    global _config
    if _config is None:
        _config = Config()
        _config.validate()
    return _config


def reset_config() -> None:
    """Drop the cached config so the next get_config() re-reads the environment."""
    global _config
    _config = None


__all__ = ['Config', 'get_config', 'reset_config', 'BREAKDOWN_STYLES', 'LOG_LEVELS']
