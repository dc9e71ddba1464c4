"""
Logging configuration for diagram-stream.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union


# Custom TRACE level for raw chunk dumps
TRACE = 5
logging.addLevelName(TRACE, 'TRACE')


class ToolCallAdapter(logging.LoggerAdapter):
    """Add tool call context to log messages."""

    def process(self, msg, kwargs):
        tool_call_id = self.extra.get('tool_call_id', '-')
        return f"[{tool_call_id}] {msg}", kwargs


class RawChunkFilter(logging.Filter):
    """Only let raw chunk dumps through at TRACE level."""

    def filter(self, record):
        message = str(record.msg)
        return record.levelno <= TRACE or not message.startswith(('>>> ', '<<< '))


def setup_logging(debug: bool = False, log_file: Optional[Path] = None,
                  log_level: Optional[str] = None):
    """
    Configure logging for diagram-stream.

    Args:
        debug: Enable debug logging
        log_file: Optional file to write logs to
        log_level: Override log level (TRACE, DEBUG, INFO, WARNING, ERROR)
    """
    # Determine log level
    if log_level:
        level_name = log_level.upper()
        level = TRACE if level_name == 'TRACE' else getattr(logging, level_name, logging.INFO)
    elif debug:
        level = logging.DEBUG
    else:
        level = logging.INFO

    if level <= logging.DEBUG:
        # Include timestamp and module for debug
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
    else:
        formatter = logging.Formatter('%(levelname)s: %(message)s')

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handlers = []
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='a'))
        # Only add console handler if not logging to /dev/null
        if str(log_file) != '/dev/null':
            handlers.append(logging.StreamHandler(sys.stderr))
    else:
        handlers.append(logging.StreamHandler(sys.stderr))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(RawChunkFilter())
        root_logger.addHandler(handler)

    if level > logging.DEBUG:
        logging.getLogger('asyncio').setLevel(logging.WARNING)


def get_logger(name: str, tool_call_id: Optional[str] = None) -> Union[logging.Logger, ToolCallAdapter]:
    """
    Get a logger with optional tool call context.

    Args:
        name: Logger name (usually __name__)
        tool_call_id: Optional tool call id for context

    Returns:
        Logger or LoggerAdapter with tool call context
    """
    logger = logging.getLogger(name)

    if tool_call_id:
        return ToolCallAdapter(logger, {'tool_call_id': tool_call_id})

    return logger
