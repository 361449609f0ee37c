import logging
from typing import Optional

from src.utils.logging.app_logger import get_logger


class Logger:
    """
    Context-carrying logger used by request middleware and review runs.

    Every record emitted through this wrapper gets the bound context
    (request id, review id, repository...) merged into its ``extra``.

    Args:
        name (str): The name of the logger instance
        request_context (dict, optional): Context attached to every record
    """

    def __init__(self, name: str, request_context: Optional[dict] = None):
        self.base_logger: logging.Logger = get_logger(name)
        self.request_context = request_context or {}

    def bind(self, **context) -> "Logger":
        """Return a new logger whose context is extended with ``context``."""
        merged = dict(self.request_context)
        merged.update(context)
        return Logger(self.base_logger.name, merged)

    def _merge_extra(self, extra: Optional[dict]) -> dict:
        if not extra:
            return dict(self.request_context)
        merged = dict(extra)
        merged.update(self.request_context)
        return merged

    def debug(self, message, extra=None):
        self.base_logger.debug(message, extra=self._merge_extra(extra))

    def info(self, message, extra=None):
        self.base_logger.info(message, extra=self._merge_extra(extra))

    def warning(self, message, extra=None):
        self.base_logger.warning(message, extra=self._merge_extra(extra))

    def error(self, message, extra=None, exc_info=False):
        self.base_logger.error(message, extra=self._merge_extra(extra), exc_info=exc_info)

    def exception(self, message, extra=None):
        """Log at ERROR level with the active exception's traceback."""
        self.base_logger.exception(message, extra=self._merge_extra(extra))

    def critical(self, message, extra=None):
        self.base_logger.critical(message, extra=self._merge_extra(extra))
