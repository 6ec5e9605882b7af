"""
Logging utilities: framework-agnostic re-exports.

Re-exports from utils.logger and utils.logging_config so that application
code imports from a single place.
"""

from utils.logger import get_logger, hash_ip
from utils.logging_config import configure_structlog, setup_logging

__all__ = [
    "get_logger",
    "hash_ip",
    "configure_structlog",
    "setup_logging",
]
