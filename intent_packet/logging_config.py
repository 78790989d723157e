"""
Logging Configuration
Console and file logging for packet generation. Records are stamped with the
document number of the packet being built, so interleaved runs stay readable.
"""
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Optional, Union

from intent_packet import config

PACKAGE_LOGGER = "intent_packet"
NO_DOCUMENT = "-"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(document)s] %(message)s'

_current_document = ContextVar("current_document", default=NO_DOCUMENT)


class DocumentFilter(logging.Filter):
    """Adds `record.document`: the packet being generated, or '-' outside one."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.document = _current_document.get()
        return True


@contextmanager
def document_context(doc_number: str):
    """Stamp records logged inside the block with `doc_number`."""
    token = _current_document.set(doc_number)
    try:
        yield
    finally:
        _current_document.reset(token)


def setup_logging(level: Union[int, str, None] = None, log_file: Optional[str] = None) -> None:
    """
    Configures the 'intent_packet' logger.

    Args:
        level: Level number or name; defaults to INTENT_PACKET_LOG_LEVEL.
        log_file: Optional path to save logs to a file.
    """
    if level is None:
        level = config.LOG_LEVEL
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    # Repeated calls replace the handlers instead of stacking them
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S')
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(DocumentFilter())
        logger.addHandler(handler)

    logger.info("Logging initialized at %s.", logging.getLevelName(level))
