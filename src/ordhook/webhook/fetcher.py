"""
Download of the files referenced by webhook requests.
"""

import asyncio
import uuid
from pathlib import Path, PurePosixPath
from typing import Optional
from urllib.parse import urlsplit

import httpx

from ordhook.core.logging import get_logger
from ordhook.core.settings import DownloadSettings
from ordhook.exceptions import DownloadError

logger = get_logger(__name__)


def extension_from_url(url: str) -> str:
    """
    Return the suffix of the last path segment of ``url``, dot included.

    Query string and fragment are ignored. No validation is applied, so
    any suffix is accepted and a path without one yields "".
    """
    return PurePosixPath(urlsplit(url).path).suffix


class FileFetcher:
    """Streams remote files into the download directory."""

    def __init__(
        self,
        settings: DownloadSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the fetcher.

        Args:
            settings: Download section of the service settings
            transport: Optional httpx transport (used to stub the network)
        """
        self.settings = settings
        self.download_dir = Path(settings.download_dir)
        self._transport = transport

    def destination_for(self, url: str) -> Path:
        """Generate a fresh, collision-free destination path for ``url``."""
        return self.download_dir / f"{uuid.uuid4()}{extension_from_url(url)}"

    async def fetch(self, url: str) -> Path:
        """
        Download ``url`` to a uniquely named local file.

        Args:
            url: HTTP(S) URL of the file

        Returns:
            Path of the written file

        Raises:
            DownloadError: request failed, non-2xx status, stream broke
                mid-transfer, or the file could not be written
        """
        destination = self.destination_for(url)

        try:
            self.download_dir.mkdir(parents=True, exist_ok=True)
            async with httpx.AsyncClient(
                timeout=self.settings.timeout_seconds,
                follow_redirects=self.settings.follow_redirects,
                transport=self._transport
            ) as client:
                async with client.stream("GET", url) as response:
                    if response.is_error:
                        raise DownloadError(
                            f"Download of {url} failed with HTTP {response.status_code}",
                            url=url,
                            status_code=response.status_code
                        )

                    # Partial files are left behind if the stream breaks
                    f = await asyncio.to_thread(open, destination, "wb")
                    try:
                        async for chunk in response.aiter_bytes(self.settings.chunk_size):
                            await asyncio.to_thread(f.write, chunk)
                    finally:
                        await asyncio.to_thread(f.close)

        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise DownloadError(f"Download of {url} failed: {e}", url=url) from e
        except OSError as e:
            raise DownloadError(f"Could not write {destination}: {e}", url=url) from e

        logger.info(f"File downloaded {url} -> {destination}")
        return destination
