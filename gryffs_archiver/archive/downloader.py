"""
Asset downloader for fetching and saving gryff images.

Requests go through the authenticated catalog session so protected
assets receive the operator's cookies.
"""

from ..errors import FetchError
from ..utils.log import get_logger
from ..utils.paths import write_bytes


class AssetDownloader:
    """
    Downloads images through an authenticated session.

    Every call makes exactly one attempt; retrying is left to the caller.
    """

    def __init__(self, session):
        """
        Initialize the asset downloader.

        Args:
            session: Session exposing ``authenticated_get(url)``
        """
        self.session = session
        self.logger = get_logger("downloader")

    async def download(self, url: str) -> bytes:
        """
        Fetch the raw bytes of an asset.

        Args:
            url: Absolute asset URL

        Returns:
            Response body

        Raises:
            FetchError: If the request fails or the status is not successful
        """
        response = await self.session.authenticated_get(url)

        if not response.ok:
            self.logger.debug(f"HTTP {response.status} for asset: {url}")
            raise FetchError(url, response.status, response.reason)

        return response.body

    async def download_to(self, url: str, local_path: str) -> int:
        """
        Download an asset and save it to a file.

        The parent directory must already exist.

        Args:
            url: Absolute asset URL
            local_path: Target file path

        Returns:
            Number of bytes written

        Raises:
            FetchError: If the download fails
            WriteError: If the file cannot be written
        """
        content = await self.download(url)
        write_bytes(local_path, content)

        self.logger.debug(f"Downloaded: {url} -> {local_path}")

        return len(content)
