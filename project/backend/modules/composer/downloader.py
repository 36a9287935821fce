"""
Media fetching for composer module.

Materialises asset references (remote URLs, data: URLs, generated-media
paths) as bytes or local files.
"""
import base64
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import httpx

from shared.config import settings
from shared.errors import CompositionError, RetryableError
from shared.logging import get_logger
from shared.retry import retry_with_backoff
from .config import GENERATED_URL_PREFIX, MIN_MEDIA_BYTES, generated_root

logger = get_logger("composer.downloader")


class MediaFetcher:
    """Resolves asset references produced anywhere in the pipeline."""

    def __init__(
        self,
        generated_dir: Optional[Path] = None,
        public_base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 120.0
    ):
        self.generated_dir = generated_root(generated_dir)
        self.public_base_url = (public_base_url or settings.public_base_url).rstrip("/")
        self._transport = transport
        self.timeout = timeout

    def resolve_local(self, url: str) -> Optional[Path]:
        """
        Map a generated-media URL to its file, or None for other references.

        Accepts both the bare path (/generated/videos/x.mp4) and the same path
        under this server's public base URL.
        """
        path = url
        if url.startswith(self.public_base_url + "/"):
            path = url[len(self.public_base_url):]
        elif url.startswith(("http://", "https://")):
            return None
        if not path.startswith(GENERATED_URL_PREFIX + "/"):
            return None
        relative = path[len(GENERATED_URL_PREFIX) + 1:]
        candidate = (self.generated_dir / relative).resolve()
        if self.generated_dir.resolve() not in candidate.parents:
            raise CompositionError(f"Refusing to read outside generated media: {url}")
        return candidate

    @staticmethod
    def decode_data_url(url: str) -> bytes:
        header, _, payload = url.partition(",")
        if not payload:
            raise CompositionError("Malformed data URL")
        if header.endswith(";base64"):
            return base64.b64decode(payload)
        return payload.encode()

    @retry_with_backoff(max_attempts=3, base_delay=1)
    async def _download(self, url: str) -> bytes:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport, follow_redirects=True) as client:
                response = await client.get(url)
        except httpx.TransportError as e:
            raise RetryableError(f"Download failed for {url}: {e}") from e
        if response.status_code >= 500 or response.status_code == 429:
            raise RetryableError(f"Download failed for {url}: HTTP {response.status_code}")
        if not response.is_success:
            raise CompositionError(f"Download failed for {url}: HTTP {response.status_code}")
        return response.content

    async def fetch_bytes(self, url: str) -> bytes:
        """
        Load an asset into memory.

        Raises:
            CompositionError: If the reference cannot be resolved or is empty
            RetryableError: If a remote download keeps failing
        """
        if not url:
            raise CompositionError("Empty media reference")

        if url.startswith("data:"):
            data = self.decode_data_url(url)
        else:
            local_path = self.resolve_local(url)
            if local_path is not None:
                if not local_path.exists():
                    raise CompositionError(f"Generated media not found: {url}")
                data = local_path.read_bytes()
            elif urlparse(url).scheme in ("http", "https"):
                data = await self._download(url)
            else:
                raise CompositionError(f"Unsupported media reference: {url[:80]}")

        if len(data) < MIN_MEDIA_BYTES:
            raise CompositionError(f"Media too small ({len(data)} bytes): {url[:80]}")
        return data

    async def fetch_to_file(self, url: str, destination: Path) -> Path:
        """Write an asset to `destination` and return the path."""
        data = await self.fetch_bytes(url)
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(data)
        logger.debug(
            "Fetched media",
            extra={"url": url[:120], "path": str(destination), "size": len(data)}
        )
        return destination
