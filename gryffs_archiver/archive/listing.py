"""
Listing enumerator for a user's gryffs.
"""

from dataclasses import dataclass
from typing import Any, Dict, List

from ..config import ArchiveConfig
from ..errors import ParseError
from ..utils.log import get_logger
from ..utils.paths import get_query_param
from ..utils.constants import ALL_BOXES, LISTING_LINK_SELECTOR, PROFILE_LINK_SELECTOR


# Resolved hrefs of all matching anchors
HREFS_SCRIPT = "links => links.map(link => link.href)"
HREF_SCRIPT = "link => link.href"


@dataclass(frozen=True)
class EntryReference:
    """One catalog entry: its numeric id and canonical detail page URL."""

    id: str
    url: str

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'url': self.url}


class ListingEnumerator:
    """Lists the entries visible on a user's listing page."""

    def __init__(self, session, config: ArchiveConfig):
        """
        Initialize the listing enumerator.

        Args:
            session: Authenticated catalog session
            config: Archive configuration
        """
        self.session = session
        self.config = config
        self.logger = get_logger("listing")

    async def current_user_id(self) -> str:
        """
        Determine the logged-in user's id from the profile link.

        Raises:
            ParseError: If the profile link is missing or has no id
        """
        self.session.require_ready()
        href = await self.session.eval_on_selector(PROFILE_LINK_SELECTOR, HREF_SCRIPT)
        user_id = get_query_param(href, 'id') if href else None

        if not user_id or not user_id.isdigit():
            raise ParseError("userId", "could not find the logged-in user's profile link")

        return user_id

    async def list_entries(self, user_id: str) -> List[EntryReference]:
        """
        List every entry on the user's listing page.

        Args:
            user_id: Catalog user id

        Returns:
            Entry references in page order, one per id
        """
        self.session.require_ready()
        await self.session.navigate(self.config.listing_url(user_id, ALL_BOXES))

        hrefs = await self.session.eval_on_selector_all(LISTING_LINK_SELECTOR, HREFS_SCRIPT)

        entries: List[EntryReference] = []
        seen = set()
        for href in hrefs:
            entry_id = get_query_param(href, 'id')
            if not entry_id or not entry_id.isdigit():
                self.logger.debug(f"Skipping link without an entry id: {href}")
                continue
            if entry_id in seen:
                continue
            seen.add(entry_id)
            entries.append(EntryReference(id=entry_id, url=href))

        self.logger.info(f"Found {len(entries)} gryffs for user {user_id}")
        return entries
