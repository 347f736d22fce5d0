"""
Logging configuration for CDK synthesis runs.
"""
import logging
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def resolve_log_level(name: Optional[str]) -> int:
    """
    Map a level name such as ``debug`` to its logging constant.

    Unknown or empty names fall back to INFO.
    """
    level = getattr(logging, (name or 'INFO').strip().upper(), None)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level_name: Optional[str] = None) -> None:
    """Send construct logs to stderr, leaving stdout to the synthesized output."""
    logging.basicConfig(
        level=resolve_log_level(level_name),
        format=LOG_FORMAT,
        datefmt='%Y-%m-%d %H:%M:%S',
        stream=sys.stderr,
    )
