"""
Upload binary files to Gemini and wait until they can be referenced.

Freshly uploaded files sit in the PROCESSING state for a while. The wait is
a fixed-interval poll with a hard attempt budget; exhausting it raises
AssetTimeoutError. Cancelling the awaiting task cancels the poll.
"""

import asyncio
from loguru import logger
from ..core.config import settings
from ..core.exceptions import AssetTimeoutError, RemoteAssetError
from .gemini import STATE_FAILED, GeminiClient, RemoteAsset


class RemoteAssetUploader:
    def __init__(
        self,
        client: GeminiClient,
        poll_interval: float | None = None,
        max_attempts: int | None = None,
        sleep=asyncio.sleep,
    ):
        self.client = client
        self.poll_interval = settings.poll_interval_seconds if poll_interval is None else poll_interval
        self.max_attempts = settings.poll_max_attempts if max_attempts is None else max_attempts
        self._sleep = sleep

    async def upload(self, data: bytes, mime_type: str, display_name: str) -> RemoteAsset:
        """
        Upload a file and block until it leaves the processing state.

        Args:
            data: Raw file bytes
            mime_type: Declared media type of the file
            display_name: Original filename, shown in the Gemini console

        Returns:
            The settled RemoteAsset with its mime type resolved. The uri may
            be missing, in which case the file cannot be referenced

        Raises:
            RemoteAssetError: upload/status call failed or the file ended FAILED
            AssetTimeoutError: still processing after max_attempts checks
        """
        asset = await self.client.upload_file(data, mime_type, display_name)
        asset = await self.wait_until_ready(asset)

        if asset.state == STATE_FAILED:
            raise RemoteAssetError(details=f"Gemini could not process {display_name} ({asset.name})")
        if not asset.mime_type:
            asset = asset.model_copy(update={"mime_type": mime_type})
        return asset

    async def wait_until_ready(self, asset: RemoteAsset) -> RemoteAsset:
        attempts = 0
        while asset.is_processing:
            if attempts >= self.max_attempts:
                logger.error("Remote asset polling exhausted", name=asset.name, attempts=attempts)
                raise AssetTimeoutError(asset.name, attempts)
            await self._sleep(self.poll_interval)
            attempts += 1
            asset = await self.client.get_file(asset.name)
            logger.debug("Polled remote asset", name=asset.name, state=asset.state, attempt=attempts)

        logger.info("Remote asset ready", name=asset.name, state=asset.state, polls=attempts)
        return asset
