import logging

from typing import Optional

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def prepare_logger(
    logger_name: str,
    logger_file_name: Optional[str] = None,
    log_level: Optional[str] = "INFO",
) -> logging.Logger:
    """
    Return a configured logger writing to stderr and, optionally, to a file.

    Handlers are attached only once per logger name, so the helper can be
    called from every endpoint and collaborator constructor.
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel((log_level or "INFO").upper())

    if getattr(logger, "_eta_configured", False):
        return logger

    formatter = logging.Formatter(fmt=_LOG_FORMAT)

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    if logger_file_name:
        file_handler = logging.FileHandler(logger_file_name, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger._eta_configured = True
    return logger
