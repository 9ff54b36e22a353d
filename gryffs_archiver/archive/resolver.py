"""
Asset resolver for gryff images.

Computes the static primary image and thumbnail URLs of an entry and
finds the images embedded in its description.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

from .extractor import parse_html
from ..errors import InvalidIdentifier
from ..utils.log import get_logger
from ..utils.constants import (
    BUCKET_SIZE,
    DEFAULT_BASE_URL,
    DEFAULT_ENTITY_KIND,
    DESCRIPTION_SELECTOR,
    PRIMARY_IMAGE_NAME,
    THUMBS_DIR_NAME,
)


class AssetRole(Enum):
    """Role of an archived image."""
    PRIMARY_IMAGE = "primary-image"
    THUMBNAIL = "thumbnail"
    DESCRIPTION_IMAGE = "description-image"


@dataclass(frozen=True)
class AssetReference:
    """
    A remote image and where it lives in the archive.

    ``local_path`` is relative to the entry's archive directory. Description
    images carry a 1-based ordinal.
    """

    remote_url: str
    local_path: str
    role: AssetRole
    ordinal: Optional[int] = None


@dataclass(frozen=True)
class ResolvedAssets:
    """Primary image and thumbnail of one entry."""

    bucket: int
    primary: AssetReference
    thumbnail: AssetReference

    @property
    def primary_url(self) -> str:
        return self.primary.remote_url

    @property
    def thumb_url(self) -> str:
        return self.thumbnail.remote_url


def parse_entry_id(entry_id: Union[str, int]) -> int:
    """
    Parse an entry identifier into a non-negative integer.

    Strings must consist of ASCII digits only, without surrounding
    whitespace or a sign.

    Raises:
        InvalidIdentifier: If the identifier is not a plain decimal number
    """
    if isinstance(entry_id, bool):
        raise InvalidIdentifier(entry_id)
    if isinstance(entry_id, int):
        if entry_id < 0:
            raise InvalidIdentifier(entry_id)
        return entry_id
    text = str(entry_id)
    if not text.isdigit() or not text.isascii():
        raise InvalidIdentifier(entry_id)
    return int(text)


class AssetResolver:
    """
    Resolves image URLs for catalog entries.

    Static images are partitioned into buckets of a thousand ids, so entry
    5193 lives under ``/static/gryffs/5/5193.png``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        entity_kind: str = DEFAULT_ENTITY_KIND
    ):
        self.base_url = base_url.rstrip('/')
        self.entity_kind = entity_kind
        self.logger = get_logger("resolver")

    def resolve_primary_and_thumb(self, entry_id: Union[str, int]) -> ResolvedAssets:
        """
        Compute the primary image and thumbnail URLs of an entry.

        Args:
            entry_id: Numeric entry identifier

        Returns:
            ResolvedAssets with both references

        Raises:
            InvalidIdentifier: If the identifier is not numeric
        """
        bucket = parse_entry_id(entry_id) // BUCKET_SIZE
        # Leading zeros are kept in file names
        number = str(entry_id)
        static_root = f"{self.base_url}/static/{self.entity_kind}"

        primary = AssetReference(
            remote_url=f"{static_root}/{bucket}/{number}.png",
            local_path=PRIMARY_IMAGE_NAME,
            role=AssetRole.PRIMARY_IMAGE,
        )
        thumbnail = AssetReference(
            remote_url=f"{static_root}/thumbs/{bucket}/{number}.png",
            local_path=f"../../{THUMBS_DIR_NAME}/{number}.png",
            role=AssetRole.THUMBNAIL,
        )

        return ResolvedAssets(bucket=bucket, primary=primary, thumbnail=thumbnail)

    def extract_embedded_image_urls(self, html: str) -> List[str]:
        """
        List the image sources inside the description container.

        Args:
            html: Rendered page HTML (or the description markup itself)

        Returns:
            ``src`` values in document order, duplicates preserved
        """
        soup = parse_html(html)
        container = soup.select_one(DESCRIPTION_SELECTOR) or soup

        urls = []
        for img in container.find_all('img'):
            src = (img.get('src') or '').strip()
            if not src or src.startswith('data:'):
                continue
            urls.append(src)

        self.logger.debug(f"Found {len(urls)} description images")
        return urls

    def description_image_refs(self, urls: List[str]) -> List[AssetReference]:
        """
        Wrap embedded image URLs as description asset references.

        Local paths are assigned by the rewriter once downloads succeed.
        """
        return [
            AssetReference(
                remote_url=url,
                local_path="",
                role=AssetRole.DESCRIPTION_IMAGE,
                ordinal=index,
            )
            for index, url in enumerate(urls, start=1)
        ]
