"""
Configuration objects for the archiving pipeline.

A single ArchiveConfig is built from the command line and passed to every
component; nothing reads process-wide state.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from .utils.constants import (
    DEFAULT_ARCHIVE_ROOT,
    DEFAULT_BASE_URL,
    DEFAULT_ENTITY_KIND,
    DEFAULT_ENTRY_DELAY,
    DEFAULT_PAGE_TIMEOUT,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
)


@dataclass
class FieldSelectors:
    """
    Scoped selectors for the loosely structured text fields.

    When a selector is set and matches, the field is read from that element
    only. Otherwise the extractor falls back to scanning every text block.
    """

    stats: Optional[str] = None
    hunting: Optional[str] = None


@dataclass
class ArchiveConfig:
    """Top-level settings that control a run."""

    archive_root: str = DEFAULT_ARCHIVE_ROOT
    base_url: str = DEFAULT_BASE_URL
    entity_kind: str = DEFAULT_ENTITY_KIND

    # Browser and HTTP settings
    timeout: int = DEFAULT_PAGE_TIMEOUT
    request_timeout: int = DEFAULT_TIMEOUT
    headless: bool = False
    user_agent: str = DEFAULT_USER_AGENT
    session_file: Optional[str] = None

    # Batch settings
    delay: float = DEFAULT_ENTRY_DELAY
    limit: Optional[int] = None
    only_ids: List[str] = field(default_factory=list)

    selectors: FieldSelectors = field(default_factory=FieldSelectors)

    def __post_init__(self):
        self.archive_root = os.path.abspath(self.archive_root)
        self.base_url = self.base_url.rstrip('/')

    @property
    def entries_root(self) -> str:
        """Directory holding one sub-directory per archived entry."""
        return os.path.join(self.archive_root, self.entity_kind)

    @property
    def listing_index_path(self) -> str:
        return os.path.join(self.archive_root, f"{self.entity_kind}.json")

    def detail_url(self, entry_id: str) -> str:
        return f"{self.base_url}/gryff.php?id={entry_id}"

    def listing_url(self, user_id: str, box: str) -> str:
        return f"{self.base_url}/ghf.php?id={user_id}&box={box}"
