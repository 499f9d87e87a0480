import logging
import os
import re
import sys
from typing import Optional


class SensitiveDataFilter(logging.Filter):
    """
    Mask API keys, bearer credentials and session cookies in log records.

    Correlation fields such as [request_id=...] and [user_id=...] pass through.
    """

    MASK = r'\1***MASKED***'

    PATTERNS = [
        # whole header value, scheme included
        (re.compile(r'(authorization["\']?\s*[:=]\s*["\']?)((?:bearer\s+)?[^"\'}\s,]+)', re.IGNORECASE), MASK),
        (re.compile(r'(bearer\s+)([^\s,}\'\"]+)', re.IGNORECASE), MASK),
        # "key:user,key:user" tables as well as single keys
        (re.compile(r'(api[_-]?keys?["\']?\s*[:=]\s*["\']?)([^"\'}\s]+)', re.IGNORECASE), MASK),
        (re.compile(r'(token["\']?\s*[:=]\s*["\']?)([^"\'}\s,]+)', re.IGNORECASE), MASK),
        (re.compile(r'(cookie["\']?\s*[:=]\s*["\']?)([^"\'}\s,;]+)', re.IGNORECASE), MASK),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self._mask(record.msg)

        if record.args:
            if isinstance(record.args, dict):
                record.args = {k: self._mask(v) for k, v in record.args.items()}
            elif isinstance(record.args, tuple):
                record.args = tuple(self._mask(arg) for arg in record.args)

        return True

    def _mask(self, value):
        if isinstance(value, str):
            for pattern, replacement in self.PATTERNS:
                value = pattern.sub(replacement, value)
        return value


def setup_logging(
    component_name: str,
    log_level: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the root logger of a component.

    Child loggers created with get_logger(f"{component_name}.<module>")
    inherit the stdout handler and the masking filter.

    Args:
        component_name: Top-level logger name (e.g., 'diary')
        log_level: DEBUG, INFO, WARNING or ERROR. Defaults to LOG_LEVEL env var or INFO

    Returns:
        Configured logger instance
    """
    if log_level is None:
        log_level = os.getenv('LOG_LEVEL', 'INFO').upper()

    level = getattr(logging, log_level, logging.INFO)

    logger = logging.getLogger(component_name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    handler.addFilter(SensitiveDataFilter())

    logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name (typically __name__).
    """
    return logging.getLogger(name)
