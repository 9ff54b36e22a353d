"""
Description rewriter for localizing embedded images.

Downloads every image embedded in a description and rewrites the markup
to reference the local copies.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from .downloader import AssetDownloader
from .resolver import AssetReference, AssetRole
from ..errors import FetchError
from ..utils.log import get_logger
from ..utils.paths import get_url_extension, resolve_url


@dataclass
class RewriteResult:
    """Rewritten description markup and the images it now references."""

    markup: str
    downloaded: List[AssetReference] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def downloaded_count(self) -> int:
        return len(self.downloaded)


def markup_forms(url: str) -> List[str]:
    """
    Spellings of a URL as it may appear in serialized markup.

    Attribute values come back unescaped from the parser, while the
    serialized markup has ``&`` written as ``&amp;``.
    """
    forms = [url]
    escaped = url.replace('&', '&amp;')
    if escaped != url:
        forms.append(escaped)
    return forms


class DescriptionRewriter:
    """
    Rewrites embedded image references in description markup.

    Local files are named ``desc_<n><ext>`` where ``n`` only advances on a
    successful download, so file names stay contiguous when some images
    fail. Replacement is a literal substitution of every occurrence of the
    image URL, so repeated images share one local file.
    """

    LOCAL_NAME_TEMPLATE = "desc_{ordinal}{ext}"

    def __init__(self, downloader: AssetDownloader, base_url: Optional[str] = None):
        """
        Initialize the description rewriter.

        Args:
            downloader: Downloader used to fetch images
            base_url: URL for resolving relative image sources
        """
        self.downloader = downloader
        self.base_url = base_url
        self.logger = get_logger("rewriter")

    async def rewrite(
        self,
        markup: str,
        images: List[AssetReference],
        entry_dir: str,
        page_url: Optional[str] = None
    ) -> RewriteResult:
        """
        Download embedded images and point the markup at the local copies.

        Args:
            markup: Raw description markup
            images: Description image references in document order
            entry_dir: Entry archive directory (must exist)
            page_url: Page the markup came from, for relative sources

        Returns:
            RewriteResult with the rewritten markup
        """
        result = RewriteResult(markup=markup)
        rewritten = {}  # URL -> local reference
        ordinal = 1

        for image in images:
            src = image.remote_url

            if src in rewritten:
                self.logger.debug(f"Already localized as {rewritten[src]}: {src}")
                continue

            local_name = self.LOCAL_NAME_TEMPLATE.format(
                ordinal=ordinal,
                ext=get_url_extension(src)
            )
            fetch_url = resolve_url(src, page_url or self.base_url)

            try:
                await self.downloader.download_to(
                    fetch_url,
                    os.path.join(entry_dir, local_name)
                )
            except FetchError as e:
                self.logger.warning(f"Failed desc image: {src} ({e})")
                result.failed.append(src)
                continue

            local_ref = f"./{local_name}"
            for form in markup_forms(src):
                result.markup = result.markup.replace(form, local_ref)

            rewritten[src] = local_ref
            result.downloaded.append(AssetReference(
                remote_url=src,
                local_path=local_name,
                role=AssetRole.DESCRIPTION_IMAGE,
                ordinal=ordinal,
            ))
            ordinal += 1

        if images:
            self.logger.info(
                f"Localized {result.downloaded_count} description images, "
                f"{len(result.failed)} failed"
            )

        return result


async def rewrite_description(
    markup: str,
    embedded_urls: List[str],
    downloader: AssetDownloader,
    entry_dir: str,
    page_url: Optional[str] = None
):
    """
    Rewrite a description given its embedded image URLs.

    Returns:
        Tuple of (rewritten_markup, downloaded_count)
    """
    images = [
        AssetReference(url, "", AssetRole.DESCRIPTION_IMAGE, index)
        for index, url in enumerate(embedded_urls, start=1)
    ]
    result = await DescriptionRewriter(downloader).rewrite(markup, images, entry_dir, page_url)
    return result.markup, result.downloaded_count
