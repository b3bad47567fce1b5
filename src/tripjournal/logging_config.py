import logging
from logging import config as logging_config


class ColoredFormatter(logging.Formatter):
    """Logging formatter that injects ANSI color codes based on levelname.

    INFO -> green, WARNING -> yellow, ERROR -> red, DEBUG -> cyan, CRITICAL -> red background.
    Colors are skipped when `use_colors` is False (e.g. logs shipped to a collector).
    """

    COLOR_MAP = {
        "DEBUG": "\x1b[36m",
        "INFO": "\x1b[32m",
        "WARNING": "\x1b[33m",
        "ERROR": "\x1b[31m",
        "CRITICAL": "\x1b[41m",
    }
    RESET = "\x1b[0m"

    def __init__(self, fmt: str | None = None, datefmt: str | None = None, use_colors: bool = True):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors:
            return super().format(record)
        # Preserve original levelname to avoid mutating record permanently
        original_levelname = record.levelname
        color = self.COLOR_MAP.get(original_levelname, "")
        record.levelname = f"{color}{original_levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original_levelname


def configure_logging(level: str = "INFO", use_colors: bool = True) -> None:
    """Configure application logging to write logs to stdout, uvicorn included."""

    default_fmt = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"
    access_fmt = "%(asctime)s %(levelname)-5s %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter_cls = "tripjournal.logging_config.ColoredFormatter"

    cfg = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"()": formatter_cls, "fmt": default_fmt, "datefmt": datefmt, "use_colors": use_colors},
            "access": {"()": formatter_cls, "fmt": access_fmt, "datefmt": datefmt, "use_colors": use_colors},
        },
        "handlers": {
            "default": {"class": "logging.StreamHandler", "formatter": "default", "stream": "ext://sys.stdout"},
            "access": {"class": "logging.StreamHandler", "formatter": "access", "stream": "ext://sys.stdout"},
        },
        "loggers": {
            "uvicorn": {"handlers": ["default"], "level": level, "propagate": False},
            "uvicorn.error": {"handlers": ["default"], "level": level, "propagate": False},
            "uvicorn.access": {"handlers": ["access"], "level": level, "propagate": False},
            "sqlalchemy.engine": {"level": "WARNING"},
        },
        "root": {"handlers": ["default"], "level": level},
    }

    logging_config.dictConfig(cfg)


__all__ = ["configure_logging", "ColoredFormatter"]
