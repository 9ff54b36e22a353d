"""
Archive writer for gryff entries.

Persists the images and the ``info.json`` manifest of one entry.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

from .downloader import AssetDownloader
from .extractor import ExtractedFields
from .listing import EntryReference
from .resolver import AssetReference, AssetResolver, ResolvedAssets
from .rewrite import DescriptionRewriter, RewriteResult
from ..config import ArchiveConfig
from ..utils.log import get_logger
from ..utils.paths import (
    ensure_dir,
    get_entry_dir,
    get_manifest_path,
    get_primary_image_path,
    get_thumbnail_path,
    get_thumbs_dir,
    write_json,
)


@dataclass
class ArchiveRecord:
    """The manifest of one archived entry."""

    entry: EntryReference
    fields: ExtractedFields

    @property
    def source_url(self) -> str:
        return self.entry.url

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the ``info.json`` schema."""
        return {
            'id': self.entry.id,
            'name': self.fields.name,
            'species': self.fields.species,
            'level': self.fields.level,
            'exp': self.fields.experience,
            'wins': self.fields.wins,
            'losses': self.fields.losses,
            'totalBattles': self.fields.total_battles,
            'huntingExp': self.fields.hunting_experience,
            'descriptionHtml': self.fields.description_html,
            'sourceUrl': self.source_url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ArchiveRecord":
        """
        Rebuild a record from its ``info.json`` form.

        Raises:
            ValueError: If the stored total disagrees with wins and losses
        """
        fields = ExtractedFields(
            name=data['name'],
            species=data['species'],
            level=int(data['level']),
            experience=int(data['exp']),
            wins=int(data['wins']),
            losses=int(data['losses']),
            hunting_experience=int(data['huntingExp']),
            description_html=data['descriptionHtml'],
        )
        total = data.get('totalBattles')
        if total is not None and int(total) != fields.total_battles:
            raise ValueError(
                f"totalBattles {total} does not equal wins + losses "
                f"({fields.total_battles})"
            )
        entry = EntryReference(id=str(data['id']), url=data['sourceUrl'])
        return cls(entry=entry, fields=fields)


class ArchiveWriter:
    """
    Writes one entry to the archive.

    Layout::

        <root>/<kind>/<id>/image.png
        <root>/<kind>/<id>/desc_<n>.<ext>
        <root>/<kind>/<id>/info.json
        <root>/thumbs/<id>.png
    """

    def __init__(self, config: ArchiveConfig, downloader: AssetDownloader):
        """
        Initialize the archive writer.

        Args:
            config: Archive configuration
            downloader: Downloader used for every image
        """
        self.config = config
        self.downloader = downloader
        self.rewriter = DescriptionRewriter(downloader, base_url=config.base_url)
        self.resolver = AssetResolver(config.base_url, config.entity_kind)
        self.logger = get_logger("writer")

        # Result of the last description rewrite, for reporting
        self.last_rewrite: Optional[RewriteResult] = None

    async def write(
        self,
        entry: EntryReference,
        fields: ExtractedFields,
        assets: ResolvedAssets,
        images: Optional[List[AssetReference]] = None
    ) -> str:
        """
        Download the entry's images and write its manifest.

        A failure partway through leaves the files already written in place.

        Args:
            entry: Entry being archived
            fields: Fields extracted from the detail page
            assets: Resolved primary image and thumbnail
            images: Description images in document order, read from the
                description markup when omitted

        Returns:
            Path of the entry's archive directory

        Raises:
            FetchError: If the primary image or thumbnail cannot be downloaded
            WriteError: If anything cannot be written
        """
        root = self.config.archive_root
        entry_dir = get_entry_dir(root, self.config.entity_kind, entry.id)
        ensure_dir(entry_dir)

        await self.downloader.download_to(
            assets.primary_url,
            get_primary_image_path(entry_dir)
        )

        ensure_dir(get_thumbs_dir(root))
        await self.downloader.download_to(
            assets.thumb_url,
            get_thumbnail_path(root, entry.id)
        )

        if images is None:
            images = self.resolver.description_image_refs(
                self.resolver.extract_embedded_image_urls(fields.description_html)
            )
        self.last_rewrite = await self.rewriter.rewrite(
            fields.description_html,
            images,
            entry_dir,
            page_url=entry.url
        )

        localized = replace(fields, description_html=self.last_rewrite.markup)
        record = ArchiveRecord(entry=entry, fields=localized)
        write_json(get_manifest_path(entry_dir), record.to_dict())

        self.logger.debug(f"Wrote manifest for gryff {entry.id}")
        return entry_dir
