"""
Archive module for gryff entries.

Contains components for the session, extraction, resolution, downloading,
rewriting, writing and listing.
"""

from .archiver import CatalogArchiver, EntryArchiver, ArchiveRunResult, EntryOutcome
from .session import CatalogSession, HttpResponse
from .extractor import FieldExtractor, ExtractedFields
from .resolver import AssetResolver, AssetReference, AssetRole, ResolvedAssets
from .downloader import AssetDownloader
from .rewrite import DescriptionRewriter, RewriteResult
from .writer import ArchiveWriter, ArchiveRecord
from .listing import ListingEnumerator, EntryReference

__all__ = [
    "CatalogArchiver",
    "EntryArchiver",
    "ArchiveRunResult",
    "EntryOutcome",
    "CatalogSession",
    "HttpResponse",
    "FieldExtractor",
    "ExtractedFields",
    "AssetResolver",
    "AssetReference",
    "AssetRole",
    "ResolvedAssets",
    "AssetDownloader",
    "DescriptionRewriter",
    "RewriteResult",
    "ArchiveWriter",
    "ArchiveRecord",
    "ListingEnumerator",
    "EntryReference",
]
