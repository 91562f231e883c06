"""
Logging setup shared by the API modules.

`new_logger(label)` hands out an adapter whose records carry a short label
(usually the endpoint or service function name). The level comes from the
LOG_LEVEL environment variable. Sign-up logs identify people by email, so
those call sites pass addresses through `mask_email` first.
"""
import logging
import os

LOG_FORMAT = '%(asctime)s %(levelname)s %(module)s %(label)s: %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class SafeLabelFormatter(logging.Formatter):
    def format(self, record):
        # Records from third-party loggers sharing our handler have no label
        if not hasattr(record, 'label'):
            record.label = '-'
        return super().format(record)


class LabelLoggerAdapter(logging.LoggerAdapter):
    def __init__(self, logger, label):
        super().__init__(logger, {'label': label})

    def process(self, msg, kwargs):
        return f"{self.extra['label']}: {msg}", kwargs


def mask_email(email) -> str:
    """'ahmed@shift.example' -> 'a***@shift.example'."""
    if not isinstance(email, str) or not email.strip():
        return '<none>'
    local, sep, domain = email.strip().partition('@')
    if not sep:
        return '***'
    return f"{local[:1]}***@{domain}"


def _log_level():
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def new_logger(label, module_name=None):
    """
    Return a logger adapter that tags every record with `label`.

    The underlying logger is named after the caller's module unless
    `module_name` is given, and gets a single stream handler on first use.
    """
    if module_name is None:
        import inspect
        frame = inspect.currentframe()
        try:
            module_name = frame.f_back.f_globals['__name__']
        finally:
            del frame
    logger = logging.getLogger(module_name)
    logger.propagate = False

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(SafeLabelFormatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(_log_level())
    return LabelLoggerAdapter(logger, label)
