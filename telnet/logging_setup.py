# telnet/logging_setup.py
import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from telnet.config import LOG_FILE, LOG_LEVEL


def get_logger(name: str = "telnet", stream=None, log_file: str = LOG_FILE):
    logger = logging.getLogger(name)
    if logger.handlers:  # evitar duplicados en recargas
        return logger
    logger.setLevel(LOG_LEVEL)

    # Mensajes de estado: stderr, para no mezclarse con los datos en stdout
    ch = logging.StreamHandler(stream or sys.stderr)
    ch.setFormatter(logging.Formatter("...%(message)s"))
    logger.addHandler(ch)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        fh = RotatingFileHandler(
            log_file, maxBytes=1_000_000, backupCount=3, encoding="utf-8"
        )
        fh.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(fh)
    return logger
