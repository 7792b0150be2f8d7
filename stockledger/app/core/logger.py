import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from stockledger.app.core.config import settings


def setup_logger(name: str = "stockledger", log_level: str | None = None) -> logging.Logger:
    """
    Configure the application logger once: console output always,
    a rotating file under LOG_DIR when one is configured.
    """
    logger = logging.getLogger(name)
    logger.setLevel(log_level or settings.log_level)

    # Already configured (reload, second app instance in tests)
    if logger.handlers:
        return logger

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if settings.log_dir:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_dir / "stockledger.log", maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"  # 5 MB
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
