"""
Utility modules for the gryffs archiver.

Contains logging, path handling, filesystem helpers, and constants.
"""

from .log import setup_logger, get_logger
from .paths import (
    resolve_url,
    get_url_extension,
    get_query_param,
    ensure_dir,
    write_bytes,
    write_json,
)
from .constants import (
    DEFAULT_BASE_URL,
    DEFAULT_ENTITY_KIND,
    DEFAULT_ARCHIVE_ROOT,
    DEFAULT_USER_AGENT,
    DEFAULT_TIMEOUT,
    DEFAULT_PAGE_TIMEOUT,
    DEFAULT_ENTRY_DELAY,
)

__all__ = [
    "setup_logger",
    "get_logger",
    "resolve_url",
    "get_url_extension",
    "get_query_param",
    "ensure_dir",
    "write_bytes",
    "write_json",
    "DEFAULT_BASE_URL",
    "DEFAULT_ENTITY_KIND",
    "DEFAULT_ARCHIVE_ROOT",
    "DEFAULT_USER_AGENT",
    "DEFAULT_TIMEOUT",
    "DEFAULT_PAGE_TIMEOUT",
    "DEFAULT_ENTRY_DELAY",
]
