# app/utils/logging.py
import logging
import re
import sys

from app.utils.settings import LOG_LEVEL

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_configured = False


class PaymentDataMaskingFilter(logging.Filter):
    """
    Masks payment instrument data before a record is emitted.

    Card numbers keep their last four digits, UPI ids keep only the provider part.
    """

    PATTERNS = [
        (re.compile(r"\b(?:\d[ -]?){9,15}(\d{4})\b"), r"****\1"),
        (re.compile(r"\b[\w.-]+@([\w.-]+)\b"), r"***@\1"),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            msg = record.msg
            for pattern, replacement in self.PATTERNS:
                msg = pattern.sub(replacement, msg)
            record.msg = msg
        return True


def _configure_root() -> None:
    global _configured
    if _configured:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_FORMAT))
    handler.addFilter(PaymentDataMaskingFilter())

    root = logging.getLogger("app")
    root.setLevel(LOG_LEVEL.upper())
    root.addHandler(handler)
    root.propagate = False
    _configured = True


def get_logger(name: str) -> logging.Logger:
    _configure_root()
    return logging.getLogger(name)
