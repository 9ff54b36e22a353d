"""
Path and URL utilities for the gryffs archiver.

Provides archive layout helpers, URL helpers and the filesystem
primitives used by the writer.
"""

import json
import os
from typing import Any, Optional
from urllib.parse import urlparse, urljoin, parse_qs, unquote

from ..errors import WriteError
from .constants import (
    DEFAULT_IMAGE_EXT,
    MANIFEST_NAME,
    PRIMARY_IMAGE_NAME,
    THUMBS_DIR_NAME,
)


def resolve_url(url: str, base_url: Optional[str] = None) -> str:
    """
    Resolve a possibly relative URL against a base URL.

    Args:
        url: URL to resolve
        base_url: Base URL for resolving relative URLs

    Returns:
        Absolute URL string
    """
    url = url.strip()

    # Handle protocol-relative URLs
    if url.startswith('//'):
        scheme = urlparse(base_url).scheme if base_url else 'https'
        return f"{scheme or 'https'}:{url}"

    if base_url and not url.startswith(('http://', 'https://')):
        return urljoin(base_url, url)

    return url


def get_url_extension(url: str, default: str = DEFAULT_IMAGE_EXT) -> str:
    """
    Get the file extension of a URL's path component.

    Args:
        url: URL to inspect
        default: Extension to use when the path has none

    Returns:
        Extension including the leading dot (e.g. '.jpg')
    """
    path = unquote(urlparse(url).path)
    ext = os.path.splitext(os.path.basename(path))[1]
    return ext or default


def get_query_param(url: str, name: str) -> Optional[str]:
    """
    Get the first value of a query parameter.

    Args:
        url: URL to inspect
        name: Query parameter name

    Returns:
        Parameter value or None if absent
    """
    values = parse_qs(urlparse(url).query).get(name)
    return values[0] if values else None


def get_entry_dir(archive_root: str, entity_kind: str, entry_id: str) -> str:
    """Directory holding one archived entry."""
    return os.path.join(archive_root, entity_kind, entry_id)


def get_thumbs_dir(archive_root: str) -> str:
    """Shared thumbnail directory under the archive root."""
    return os.path.join(archive_root, THUMBS_DIR_NAME)


def get_primary_image_path(entry_dir: str) -> str:
    return os.path.join(entry_dir, PRIMARY_IMAGE_NAME)


def get_thumbnail_path(archive_root: str, entry_id: str) -> str:
    return os.path.join(get_thumbs_dir(archive_root), f"{entry_id}.png")


def get_manifest_path(entry_dir: str) -> str:
    return os.path.join(entry_dir, MANIFEST_NAME)


def ensure_dir(path: str) -> None:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists

    Raises:
        WriteError: If the directory cannot be created
    """
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as e:
        raise WriteError(path, str(e)) from e


def write_bytes(path: str, content: bytes) -> None:
    """
    Write raw bytes to a file, replacing any previous content.

    The parent directory must already exist.

    Args:
        path: Target file path
        content: Bytes to write

    Raises:
        WriteError: If the file cannot be written
    """
    try:
        with open(path, 'wb') as f:
            f.write(content)
    except OSError as e:
        raise WriteError(path, str(e)) from e


def write_json(path: str, value: Any) -> None:
    """
    Serialize a value as indented JSON, replacing any previous content.

    Args:
        path: Target file path
        value: JSON-serializable value

    Raises:
        WriteError: If the file cannot be written
    """
    try:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(value, f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise WriteError(path, str(e)) from e


def read_json(path: str) -> Any:
    """Load a JSON document written by write_json."""
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)
