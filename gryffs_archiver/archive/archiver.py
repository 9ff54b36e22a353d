"""
Main archiving module.

Runs the per-entry pipeline (navigate, extract, resolve, download, rewrite,
write) and supervises it over a user's whole listing.
"""

import asyncio
import os
import time
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .downloader import AssetDownloader
from .extractor import FieldExtractor
from .listing import EntryReference, ListingEnumerator
from .resolver import AssetResolver
from .writer import ArchiveWriter
from ..config import ArchiveConfig
from ..utils.log import get_logger, create_progress, print_info, print_success, print_warning
from ..utils.paths import ensure_dir, write_json
from ..utils.constants import DESCRIPTION_SELECTOR, ERRORS_NAME, INNER_HTML_SCRIPT


@dataclass
class EntryOutcome:
    """Result of archiving one entry: a directory or an error."""

    entry: EntryReference
    path: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    images_downloaded: int = 0
    images_failed: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_error_dict(self) -> Dict[str, str]:
        return {
            'id': self.entry.id,
            'url': self.entry.url,
            'error': self.error,
            'type': self.error_type,
        }


@dataclass
class ArchiveRunResult:
    """Results of archiving a batch of entries."""

    user_id: Optional[str] = None
    outcomes: List[EntryOutcome] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def archived(self) -> List[EntryOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failed(self) -> List[EntryOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def errors(self) -> List[Dict[str, str]]:
        return [o.to_error_dict() for o in self.failed]


class EntryArchiver:
    """
    Archives a single entry.

    Given one entry reference it produces one archive directory, or raises
    the error that aborted it.
    """

    def __init__(self, config: ArchiveConfig, session):
        """
        Initialize the entry archiver.

        Args:
            config: Archive configuration
            session: Authenticated catalog session
        """
        self.config = config
        self.session = session
        self.logger = get_logger("archiver")

        self.extractor = FieldExtractor(config.selectors)
        self.resolver = AssetResolver(config.base_url, config.entity_kind)
        self.downloader = AssetDownloader(session)
        self.writer = ArchiveWriter(config, self.downloader)

    async def archive(self, entry: EntryReference) -> EntryOutcome:
        """
        Archive one entry.

        Args:
            entry: Entry to archive

        Returns:
            EntryOutcome with the entry directory

        Raises:
            SessionNotReadyError: If the login was not confirmed
            InvalidIdentifier: If the entry id is not numeric
            ParseError: If a required field is missing from the page
            FetchError: If the page, primary image or thumbnail cannot be fetched
            WriteError: If the archive cannot be written
        """
        self.session.require_ready()

        # Fail on a bad id before touching the network
        assets = self.resolver.resolve_primary_and_thumb(entry.id)

        await self.session.navigate(entry.url)
        html = await self.session.content()
        # Raw markup as the browser holds it, not re-serialized
        description_html = await self.session.eval_on_selector(
            DESCRIPTION_SELECTOR, INNER_HTML_SCRIPT
        )

        fields = self.extractor.extract(html, description_html)
        images = self.resolver.description_image_refs(
            self.resolver.extract_embedded_image_urls(fields.description_html)
        )

        path = await self.writer.write(entry, fields, assets, images)
        rewrite = self.writer.last_rewrite

        self.logger.info(f"Archived gryff {entry.id} ({fields.name}) -> {path}")

        return EntryOutcome(
            entry=entry,
            path=path,
            images_downloaded=rewrite.downloaded_count if rewrite else 0,
            images_failed=list(rewrite.failed) if rewrite else [],
        )


class CatalogArchiver:
    """
    Archives every entry of a user's listing.

    Each entry runs independently; a fatal error for one entry is recorded
    in its outcome and the batch continues.
    """

    def __init__(self, config: ArchiveConfig, session):
        """
        Initialize the catalog archiver.

        Args:
            config: Archive configuration
            session: Authenticated catalog session
        """
        self.config = config
        self.session = session
        self.logger = get_logger("archiver")

        self.listing = ListingEnumerator(session, config)
        self.entry_archiver = EntryArchiver(config, session)

    async def archive_all(self, user_id: Optional[str] = None) -> ArchiveRunResult:
        """
        Archive every entry visible to a user.

        When ids were given explicitly, those entries are archived directly
        and the listing is not fetched.

        Args:
            user_id: Catalog user id, detected from the session when omitted

        Returns:
            ArchiveRunResult with one outcome per archived entry
        """
        self.session.require_ready()

        if self.config.only_ids:
            entries = [
                EntryReference(id=entry_id, url=self.config.detail_url(entry_id))
                for entry_id in self.config.only_ids
            ]
            result = await self.archive_entries(self.select_entries(entries))
            result.user_id = user_id
            return result

        if not user_id:
            user_id = await self.listing.current_user_id()
            print_info(f"Logged in as user ID: {user_id}")

        print_info("Fetching list of gryffs...")
        entries = await self.listing.list_entries(user_id)
        print_info(f"Found {len(entries)} gryffs!")

        self._write_listing_index(user_id, entries)

        result = await self.archive_entries(self.select_entries(entries))
        result.user_id = user_id
        return result

    def select_entries(self, entries: List[EntryReference]) -> List[EntryReference]:
        """Apply the configured limit."""
        if self.config.limit is not None:
            return entries[:self.config.limit]
        return entries

    async def archive_entries(self, entries: Iterable[EntryReference]) -> ArchiveRunResult:
        """
        Archive entries one after another, isolating failures.

        Args:
            entries: Entries to archive

        Returns:
            ArchiveRunResult with one outcome per entry
        """
        entries = list(entries)
        start_time = time.time()
        result = ArchiveRunResult()

        ensure_dir(self.config.entries_root)

        with create_progress() as progress:
            task = progress.add_task("Archiving gryffs", total=len(entries))

            for index, entry in enumerate(entries):
                outcome = await self._archive_one(entry)
                result.outcomes.append(outcome)
                progress.advance(task)

                # Rate limiting
                if self.config.delay and index < len(entries) - 1:
                    await asyncio.sleep(self.config.delay)

        result.duration_seconds = time.time() - start_time
        self._generate_error_log(result)

        print_success(
            f"Archived {len(result.archived)} of {len(entries)} gryffs "
            f"in {result.duration_seconds:.1f}s"
        )
        if result.failed:
            print_warning(f"{len(result.failed)} gryffs failed, see {ERRORS_NAME}")

        return result

    async def _archive_one(self, entry: EntryReference) -> EntryOutcome:
        """Archive one entry, converting any failure into an outcome."""
        try:
            return await self.entry_archiver.archive(entry)
        except Exception as e:
            self.logger.error(f"Error archiving gryff {entry.id}: {e}")
            return EntryOutcome(
                entry=entry,
                error=str(e),
                error_type=type(e).__name__,
            )

    def _write_listing_index(self, user_id: str, entries: List[EntryReference]) -> None:
        """Write the listing index next to the entry directories."""
        ensure_dir(self.config.archive_root)
        write_json(self.config.listing_index_path, {
            'userId': user_id,
            'total': len(entries),
            'gryffs': [e.to_dict() for e in entries],
        })
        self.logger.info(f"Generated listing index: {self.config.listing_index_path}")

    def _generate_error_log(self, result: ArchiveRunResult) -> None:
        """Generate errors.json file if there are errors."""
        if not result.failed:
            return

        errors_path = os.path.join(self.config.archive_root, ERRORS_NAME)
        write_json(errors_path, result.errors)

        self.logger.info(f"Generated error log: {errors_path}")
