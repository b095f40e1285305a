import json
import logging
import sys
import traceback
from logging.handlers import RotatingFileHandler
from pathlib import Path

from core.config import settings

LOGS_DIR = Path("logs")
LOGS_DIR.mkdir(exist_ok=True)


class ColoredFormatter(logging.Formatter):
    """Colored level names for the terminal"""

    COLORS = {
        'DEBUG': '\033[36m',  # cyan
        'INFO': '\033[32m',  # green
        'WARNING': '\033[33m',  # yellow
        'ERROR': '\033[31m',  # red
        'CRITICAL': '\033[35m',  # magenta
        'RESET': '\033[0m'
    }

    def format(self, record):
        log_color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{log_color}{record.levelname}{self.COLORS['RESET']}"
        return super().format(record)


def setup_logger(
        name: str,
        log_file: str = None,
        level: int | str = settings.LOG_LEVEL,
        max_bytes: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5
) -> logging.Logger:
    """
    Configure a logger writing to the console and, optionally, a rotating file.

    Args:
        name: logger name
        log_file: file name under logs/ (console only when None)
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        max_bytes: size of a log file before it is rotated
        backup_count: number of rotated files to keep
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    logger.handlers.clear()

    log_format = '%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s'
    date_format = '%Y-%m-%d %H:%M:%S'

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(ColoredFormatter(log_format, datefmt=date_format))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = RotatingFileHandler(
            LOGS_DIR / log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(log_format, datefmt=date_format))
        logger.addHandler(file_handler)

    return logger


class DatabaseLogger:
    """Logs row level changes made by the services"""

    def __init__(self, logger_name: str = "database"):
        self.logger = setup_logger(
            name=logger_name,
            log_file=f"{logger_name}.log"
        )

    def log_create(self, model_name: str, data: dict):
        self.logger.info(
            f"CREATE {model_name}:\n{json.dumps(data, ensure_ascii=False, indent=2, default=str)}"
        )

    def log_update(self, model_name: str, record_id: int, changes: dict):
        self.logger.info(
            f"UPDATE {model_name} (id={record_id}):\n"
            f"{json.dumps(changes, ensure_ascii=False, indent=2, default=str)}"
        )

    def log_delete(self, model_name: str, record_id: int):
        self.logger.warning(f"DELETE {model_name} (id={record_id})")

    def log_error(self, operation: str, error: Exception):
        self.logger.error(
            f"DB ERROR in {operation}:\n"
            f"Error Type: {type(error).__name__}\n"
            f"Error Message: {str(error)}\n"
            f"Traceback:\n{traceback.format_exc()}"
        )


class ExternalServiceLogger:
    """Logs calls to the weather, species and text generation services"""

    def __init__(self, logger_name: str = "external"):
        self.logger = setup_logger(
            name=logger_name,
            log_file=f"{logger_name}.log"
        )

    def log_request(self, service: str, target: str, params: dict = None):
        msg = f"-> {service}: {target}"
        if params:
            msg += f"\nPARAMS: {json.dumps(params, ensure_ascii=False, default=str)}"
        self.logger.debug(msg)

    def log_response(self, service: str, status: int | str, elapsed_ms: float):
        self.logger.info(f"<- {service}: status={status} in {elapsed_ms:.0f}ms")

    def log_error(self, service: str, error: Exception):
        self.logger.error(
            f"{service} ERROR:\n"
            f"Error Type: {type(error).__name__}\n"
            f"Error Message: {str(error)}"
        )


db_logger = DatabaseLogger()
external_logger = ExternalServiceLogger()
app_logger = setup_logger("app", "app.log")
