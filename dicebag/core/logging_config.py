"""
Logging configuration for dicebag.

Engine modules log through ``logging.getLogger(__name__)`` and never configure
handlers themselves. The entry points (CLI, dev server) call setup_logging()
once:
- console output goes to stderr, so rolls printed on stdout stay pipeable
- level names are colored with colorama when stderr is a terminal
- an optional log file receives every record, uncolored
"""

import logging
import sys
from typing import Optional, Union

from colorama import Fore, Back, Style, just_fix_windows_console

just_fix_windows_console()

DEFAULT_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'

# Third-party loggers that drown out dice logs at DEBUG
NOISY_LOGGERS = ('werkzeug', 'urllib3')


class ColoredFormatter(logging.Formatter):
    """
    Formatter that colors and tags the level name.

    Rejected rolls are WARNING (yellow); evaluator state errors are
    CRITICAL (red on white).
    """

    LEVEL_STYLES = {
        'DEBUG': (Fore.CYAN, '🔍'),
        'INFO': (Fore.GREEN, 'ℹ️ '),
        'WARNING': (Fore.YELLOW, '⚠️ '),
        'ERROR': (Fore.RED, '❌'),
        'CRITICAL': (Fore.RED + Back.WHITE + Style.BRIGHT, '🚨'),
    }

    def format(self, record: logging.LogRecord) -> str:
        color, icon = self.LEVEL_STYLES.get(record.levelname, ('', ''))
        levelname = record.levelname
        record.levelname = f"{color}{icon} {levelname}{Style.RESET_ALL}"
        try:
            return super().format(record)
        finally:
            # Other handlers share the record
            record.levelname = levelname


def _resolve_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def setup_logging(
    level: Union[str, int] = 'INFO',
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
    use_colors: Optional[bool] = None
) -> logging.Logger:
    """
    Configure the root logger for dicebag.

    Args:
        level: Console level name or number (DEBUG shows tokens and RPN)
        log_file: Optional file that receives every record
        format_string: Optional custom format string
        use_colors: Color the console output. None colors only when stderr
                    is a terminal.

    Returns:
        Configured root logger

    Raises:
        ValueError: If level is not a known level name

    Example:
        setup_logging(level='DEBUG', log_file='dicebag.log')
    """
    console_level = _resolve_level(level)
    format_string = format_string or DEFAULT_FORMAT
    if use_colors is None:
        use_colors = sys.stderr.isatty()

    root = logging.getLogger()
    root.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    formatter_class = ColoredFormatter if use_colors else logging.Formatter
    console_handler.setFormatter(formatter_class(format_string))
    root.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(format_string))
        root.addHandler(file_handler)
        root.setLevel(logging.DEBUG)
    else:
        root.setLevel(console_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(console_level, logging.WARNING))

    return root


__all__ = ['setup_logging', 'ColoredFormatter', 'DEFAULT_FORMAT']
