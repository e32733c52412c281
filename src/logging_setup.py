# src/logging_setup.py
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logger(log_file: str = "logs/habitual.log", level: str = "INFO",
                 max_bytes: int = 10_000_000, backup_count: int = 5):
    """Attach a rotating file handler and a console handler to the root logger."""
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Repeated calls (uvicorn reload, tests) must not stack handlers
    if any(getattr(h, "_habitual", False) for h in logger.handlers):
        return logger

    formatter = logging.Formatter(LOG_FORMAT)
    handlers = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(exist_ok=True, parents=True)
        handlers.append(RotatingFileHandler(log_file, maxBytes=max_bytes,
                                            backupCount=backup_count, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        handler._habitual = True
        logger.addHandler(handler)
    return logger
