"""Логи relay: строки вида "[12:34:56] сообщение" в консоль и, по желанию, в файл."""

import logging
import sys

LOGGER_NAME = "relay"
LOG_FORMAT  = "[%(asctime)s] %(message)s"
DATE_FORMAT = "%H:%M:%S"

log = logging.getLogger(LOGGER_NAME)


def setup_logging(log_file: str | None = None, level: int = logging.INFO) -> logging.Logger:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    # повторный вызов не должен дублировать строки
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    log.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        log.addHandler(file_handler)

    log.setLevel(level)
    return log
