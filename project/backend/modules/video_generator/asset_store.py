"""
Durable copies of generated assets.

Provider URLs expire; when enabled, each asset is downloaded and re-uploaded
to Supabase Storage through the shared transfer queue.
"""
from typing import Optional

from shared.config import settings
from shared.logging import get_logger
from shared.storage import StorageClient
from shared.transfer_queue import TransferQueue, get_transfer_queue
from modules.composer.downloader import MediaFetcher
from modules.video_generator.config import ASSET_CONTENT_TYPES, ASSET_EXTENSIONS

logger = get_logger("video_generator.asset_store")


class AssetPersister:
    """Copies assets into durable storage; never raises."""

    def __init__(
        self,
        storage: Optional[StorageClient] = None,
        fetcher: Optional[MediaFetcher] = None,
        queue: Optional[TransferQueue] = None,
        enabled: Optional[bool] = None
    ):
        self.enabled = settings.persist_assets if enabled is None else enabled
        self._storage = storage
        self.fetcher = fetcher or MediaFetcher()
        self.queue = queue or get_transfer_queue()

    @property
    def storage(self) -> StorageClient:
        if self._storage is None:
            self._storage = StorageClient()
        return self._storage

    @staticmethod
    def object_path(story_id: str, segment_id: str, kind: str, suffix: str = "") -> str:
        return f"{story_id}/{segment_id}{suffix}.{ASSET_EXTENSIONS.get(kind, 'bin')}"

    async def _transfer(self, url: str, path: str, kind: str) -> str:
        data = await self.fetcher.fetch_bytes(url)
        return await self.storage.upload_file(
            path,
            data,
            kind=kind,
            content_type=ASSET_CONTENT_TYPES.get(kind)
        )

    async def persist(
        self,
        url: str,
        kind: str,
        story_id: str,
        segment_id: str,
        suffix: str = ""
    ) -> Optional[str]:
        """
        Copy an asset to durable storage.

        Returns:
            Durable URL, or None when disabled or the transfer failed
        """
        if not self.enabled or not url:
            return None
        path = self.object_path(story_id, segment_id, kind, suffix)
        try:
            durable_url = await self.queue.submit(self._transfer, url, path, kind)
        except Exception as e:
            logger.warning(
                f"Failed to persist {kind} for segment {segment_id}: {e}",
                extra={"story_id": story_id, "segment_id": segment_id, "kind": kind, "error": str(e)}
            )
            return None
        logger.info(
            f"Persisted {kind} for segment {segment_id}",
            extra={"story_id": story_id, "segment_id": segment_id, "path": path}
        )
        return durable_url
