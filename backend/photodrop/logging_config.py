import logging
import sys
from pathlib import Path

from photodrop.config import settings

LOGGER_NAME = "photodrop"


def setup_logger(level: str | None = None, log_file: str | None = None) -> logging.Logger:
    """
    Configura el logger "photodrop" una sola vez y lo retorna.

    Los loggers hijos ("photodrop.services.gate", ...) propagan hasta aqui,
    asi cada modulo solo necesita logging.getLogger(__name__).
    """
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)

    console_formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(name)s - %(message)s'
    )
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel((level or settings.LOG_LEVEL).upper())
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    log_file = log_file if log_file is not None else settings.LOG_FILE
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
        )
        file_handler = logging.FileHandler(path)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    return logger
