import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import os

BASE_DIR = Path(__file__).resolve().parent

LOG_DIR = Path(os.getenv("GAMESTORE_LOG_DIR", BASE_DIR / "logs"))
LOG_LEVEL = os.getenv("GAMESTORE_LOG_LEVEL", "INFO").upper()


def get_logger(name: str):
    logger = logging.getLogger(name)
    if logger.hasHandlers():
        return logger

    logger.setLevel(LOG_LEVEL)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(LOG_LEVEL)
    console_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logger.addHandler(console_handler)

    # file handler is skipped when the log dir cannot be created (read-only deploys)
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
    except OSError:
        logger.warning("log directory %s is not writable, file logging disabled", LOG_DIR)
    else:
        file_handler = RotatingFileHandler(
            LOG_DIR / f"{name}.log",
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(LOG_LEVEL)
        file_handler.setFormatter(logging.Formatter(
            "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"
        ))
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger
