import logging
import os

from rich.logging import RichHandler

_FORMAT = "[%(name)s]  %(message)s"


class CenteredNameFormatter(logging.Formatter):
    """Pads logger names so messages through one handler line up."""

    def __init__(self, fmt=None, datefmt=None, style="%", initial_width=12):
        super().__init__(fmt, datefmt, style)
        # widest name seen by this formatter only
        self.name_width = initial_width

    def format(self, record):
        self.name_width = max(self.name_width, len(record.name))
        record = logging.makeLogRecord(record.__dict__)
        record.name = record.name.center(self.name_width)
        return super().format(record)


def _level() -> int:
    return logging.DEBUG if os.getenv("DEBUG") else logging.INFO


def get_logger(name=None) -> logging.Logger:
    """
    Return a logger writing through rich; handlers are attached only once.
    """
    logger = logging.getLogger(name or "pos")
    level = _level()
    logger.setLevel(level)

    if not logger.handlers:
        handler = RichHandler(
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        handler.setFormatter(CenteredNameFormatter(_FORMAT))
        handler.setLevel(level)
        logger.addHandler(handler)
        logger.propagate = False
        logger.debug(f"Logger '{logger.name}' ready.")

    return logger
