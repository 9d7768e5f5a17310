# backend/prdify/utils/logging.py
import logging
import sys
from logging.handlers import RotatingFileHandler

from ..config import settings

LOG_DIR = settings.LOG_PATH
LOG_DIR.mkdir(parents=True, exist_ok=True)

# Attributes every LogRecord has; anything else on a record came from `extra`
RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


class ContextFormatter(logging.Formatter):
    """Formatter that appends the record's `extra` fields as key=value pairs"""

    def format(self, record):
        line = super().format(record)
        context = {
            key: value for key, value in vars(record).items()
            if key not in RESERVED_ATTRS and not key.startswith("_")
        }
        if not context:
            return line
        return line + " | " + " ".join(f"{key}={value!r}" for key, value in sorted(context.items()))


console_formatter = ContextFormatter(
    '\033[1;36m%(asctime)s\033[0m - \033[1;33m%(name)s\033[0m - \033[1;35m%(levelname)s\033[0m [\033[1;34m%(module)s:%(lineno)d\033[0m] - %(message)s'
)
file_formatter = ContextFormatter(
    '%(asctime)s - %(name)s - %(levelname)s [%(module)s:%(lineno)d] - %(message)s'
)


class PrdifyLogger:
    """Component logger that keeps `extra` keys from clobbering LogRecord attributes"""

    def __init__(self, name: str, level: str = settings.LOG_LEVEL):
        self.logger = logging.getLogger(f"prdify.{name}")
        self.logger.setLevel(level)
        self.logger.propagate = False
        self.setup_handlers(name)

    def setup_handlers(self, name: str):
        if self.logger.handlers:
            return

        file_handler = RotatingFileHandler(
            LOG_DIR / f"{name}.log",
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5
        )
        file_handler.setFormatter(file_formatter)
        self.logger.addHandler(file_handler)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(console_formatter)
        self.logger.addHandler(console_handler)

    @staticmethod
    def _sanitize_extra(extra):
        if extra is None:
            return None
        return {
            (f"extra_{key}" if key in RESERVED_ATTRS else key): value
            for key, value in extra.items()
        }

    def _log(self, level, msg, extra=None, exc_info=None):
        # stacklevel points module:lineno at the caller, not this wrapper
        self.logger.log(level, msg, extra=self._sanitize_extra(extra), exc_info=exc_info, stacklevel=3)

    def debug(self, msg, extra=None, exc_info=None):
        self._log(logging.DEBUG, msg, extra, exc_info)

    def info(self, msg, extra=None, exc_info=None):
        self._log(logging.INFO, msg, extra, exc_info)

    def warning(self, msg, extra=None, exc_info=None):
        self._log(logging.WARNING, msg, extra, exc_info)

    def error(self, msg, extra=None, exc_info=None):
        self._log(logging.ERROR, msg, extra, exc_info)

    def critical(self, msg, extra=None, exc_info=None):
        self._log(logging.CRITICAL, msg, extra, exc_info)


api_logger = PrdifyLogger("api")
db_logger = PrdifyLogger("database")
service_logger = PrdifyLogger("service")
ai_logger = PrdifyLogger("ai")

__all__ = ["PrdifyLogger", "api_logger", "db_logger", "service_logger", "ai_logger"]
