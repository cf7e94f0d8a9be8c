"""
Logging for VoiceReel sessions

Everything under the 'voicereel' logger goes to a rotating log file; the
console gets the same records through rich so they interleave cleanly with
the progress bar.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

# HTTP client chatter that drowns out pipeline messages at INFO
NOISY_LOGGERS = ("openai", "httpx", "httpcore", "aiohttp.access")


def setup_logging(config: 'Config', console: Optional[Console] = None) -> logging.Logger:
    """Configure the 'voicereel' logger from config.logging"""
    log_config = config.logging

    log_path = Path(log_config.file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger('voicereel')
    logger.setLevel(getattr(logging, log_config.level.upper()))
    logger.handlers.clear()
    logger.propagate = False

    file_handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=log_config.max_size_mb * 1024 * 1024,
        backupCount=log_config.backup_count,
        encoding='utf-8'
    )
    file_handler.setFormatter(logging.Formatter(log_config.format))
    logger.addHandler(file_handler)

    # rich adds its own time/level columns
    console_handler = RichHandler(console=console, show_path=False, markup=False)
    console_handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(console_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


class LoggerMixin:
    """Gives a class a 'voicereel.<ClassName>' logger"""

    @property
    def logger(self) -> logging.Logger:
        if not hasattr(self, '_logger'):
            self._logger = logging.getLogger(f'voicereel.{self.__class__.__name__}')
        return self._logger
