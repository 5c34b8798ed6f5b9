"""Sampled logger for high-frequency log messages.

Provides utilities to reduce log spam by only logging at configurable intervals.
"""

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


def make_sampled_logger(
    log_format: str,
    log_interval: int = 1000,
    target_logger: logging.Logger | None = None,
    level: int = logging.DEBUG,
) -> Callable[..., None]:
    """Create a sampled logger that logs the first and every Nth item.

    Args:
        log_format: Format string for the log message. First placeholder receives
                    the item count, remaining placeholders receive extra_args.
        log_interval: Log every Nth item (default 1000)
        target_logger: Logger instance to use (default: module logger)
        level: Log level to use (default: DEBUG)

    Returns:
        A function: (count, *format_args) -> None
    """
    _logger = target_logger or logger
    interval = max(1, log_interval)

    def log_sampled(count: int, *format_args: object) -> None:
        if count == 1 or count % interval == 0:
            _logger.log(level, log_format, count, *format_args)

    return log_sampled
