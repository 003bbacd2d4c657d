import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

DEFAULT_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'


def setup_logger(
    log_file: Optional[Union[str, Path]] = "logs/taskboard.log",
    level: int = logging.INFO,
    fmt: str = DEFAULT_FORMAT,
    datefmt: Optional[str] = None,
    max_bytes: int = 10_000_000,
    backup_count: int = 5,
) -> logging.Logger:
    """Консоль + ротируемый файл. Повторный вызов заменяет обработчики."""
    logger = logging.getLogger()
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    formatter = logging.Formatter(fmt, datefmt=datefmt)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file:
        Path(log_file).parent.mkdir(exist_ok=True, parents=True)
        handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logging.captureWarnings(True)
    return logger
