"""
Single Upload Workflow

Uploads one image, writes its metadata file and uploads that file too.
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import Awaitable, Callable, Optional

from metadata_engine import MetadataGenerator
from uploader.config import Settings
from uploader.models import SingleRunRecord
from .asset_scanner import require_directory, select_first_image
from .pinning_provider import PinningProvider
from .result_recorder import ResultRecorder
from .retry_orchestrator import RetryPolicy, upload_file_with_retry
from .upload_client import UploadClient

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_ID = 1


class SingleWorkflow:
    """Runs the single-asset pipeline end to end."""

    def __init__(
        self,
        provider: PinningProvider,
        settings: Settings,
        generator: Optional[MetadataGenerator] = None,
        recorder: Optional[ResultRecorder] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.settings = settings
        self.client = UploadClient(provider)
        self.policy = RetryPolicy.from_settings(settings)
        self.generator = generator or MetadataGenerator(
            collection_name=settings.COLLECTION_NAME,
            description=settings.COLLECTION_DESCRIPTION,
        )
        self.recorder = recorder or ResultRecorder(
            settings.OUTPUT_DIR, settings.PINATA_GATEWAY
        )
        self.sleep = sleep

    @property
    def image_dir(self) -> Path:
        return Path(self.settings.ASSETS_DIR) / self.settings.SINGLE_IMAGE_SUBDIR

    async def run(self, token_id: Optional[int] = None) -> SingleRunRecord:
        """
        Execute the single workflow.

        Args:
            token_id: Token ID written into the metadata (default: 1)

        Returns:
            SingleRunRecord: The persisted run record

        Raises:
            ValidationError: If the image directory is missing or has no images
            RetriesExhaustedError: If an upload fails on every attempt
            OSError: On local filesystem failures
        """
        start_time = time.monotonic()
        token_id = DEFAULT_TOKEN_ID if token_id is None else token_id

        image_dir = require_directory(self.image_dir, "Single image directory")
        image_path = select_first_image(image_dir)
        logger.info(f"Selected image: {image_path.name}")

        logger.info("Step 1: Uploading image")
        image_cid = (
            await upload_file_with_retry(
                self.client, image_path, self.policy, name=image_path.name, sleep=self.sleep
            )
        ).cid
        logger.info(f"Image CID: {image_cid}")

        logger.info("Step 2: Writing metadata")
        run_dir = self.recorder.create_run_directory("single")
        metadata = self.generator.build_record(token_id, f"ipfs://{image_cid}")
        metadata_path = run_dir / f"{image_path.stem}.json"
        with open(metadata_path, "w", encoding="utf-8") as f:
            f.write(metadata.to_json())
        logger.info(f"Created metadata file: {metadata_path}")

        logger.info("Step 3: Uploading metadata")
        metadata_cid = (
            await upload_file_with_retry(
                self.client,
                metadata_path,
                self.policy,
                name=metadata_path.name,
                sleep=self.sleep,
            )
        ).cid
        logger.info(f"Metadata CID: {metadata_cid}")

        record = SingleRunRecord(
            token_id=token_id,
            image_file=image_path.name,
            image_cid=image_cid,
            metadata_cid=metadata_cid,
            image_url=f"ipfs://{image_cid}",
            metadata_url=f"ipfs://{metadata_cid}",
            gateway_image_url=self.recorder.gateway_url(image_cid),
            gateway_metadata_url=self.recorder.gateway_url(metadata_cid),
            metadata=metadata,
            elapsed_seconds=time.monotonic() - start_time,
        )

        logger.info("Step 4: Recording results")
        self.recorder.record_single(run_dir, record)
        logger.info(f"Token URI: {record.metadata_url}")
        return record
