"""
Batch Upload Workflow

Uploads a folder of images, generates one metadata file per image pointing
at the images folder CID, uploads the metadata folder(s) and records the run.
"""

import asyncio
import logging
import shutil
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Awaitable, Callable, Optional

from metadata_engine import MetadataGenerator, metadata_filename
from metadata_engine.naming import DUAL_VERSION_SUFFIX
from uploader.config import Settings
from uploader.models import BatchRunRecord, MetadataFileEntry
from .asset_scanner import collect_size_warnings, require_directory, scan_assets
from .pinning_provider import PinningProvider
from .result_recorder import ResultRecorder, format_run_timestamp
from .retry_orchestrator import RetryPolicy, upload_directory_with_retry
from .upload_client import UploadClient, log_folder_size

logger = logging.getLogger(__name__)


class BatchWorkflow:
    """
    Runs the batch pipeline end to end.

    Each stage depends on the previous one; the first failure aborts the run.
    Nothing already pinned is rolled back.
    """

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
    def images_dir(self) -> Path:
        return Path(self.settings.ASSETS_DIR) / self.settings.BATCH_IMAGES_SUBDIR

    async def run(self, both_versions: bool = False) -> BatchRunRecord:
        """
        Execute the batch workflow.

        Args:
            both_versions: Generate and upload both the suffixed (.json) and
                the unsuffixed metadata folders

        Returns:
            BatchRunRecord: The persisted run record

        Raises:
            ValidationError: If the images directory is missing or has no images
            MetadataGenerationError: If metadata generation fails
            RetriesExhaustedError: If an upload fails on every attempt
            OSError: On local filesystem failures
        """
        start_time = time.monotonic()
        images_dir = require_directory(self.images_dir, "Batch images directory")
        output_root = Path(self.settings.OUTPUT_DIR)

        logger.info(f"Step 1: Uploading images folder {images_dir}")
        log_folder_size(images_dir)
        images_upload = await upload_directory_with_retry(
            self.client, images_dir, self.policy, sleep=self.sleep
        )
        images_cid = images_upload.cid
        logger.info(f"Images folder CID: {images_cid}")

        logger.info("Step 2: Scanning image files")
        assets = scan_assets(images_dir)
        total_size, size_warnings = collect_size_warnings(
            assets, self.settings.MAX_FILE_SIZE, self.settings.MAX_TOTAL_SIZE
        )
        for warning in size_warnings:
            logger.warning(warning)

        stamp = format_run_timestamp(datetime.now(timezone.utc))
        with_suffix_cid: Optional[str] = None
        without_suffix_cid: Optional[str] = None

        if both_versions:
            metadata_suffix = DUAL_VERSION_SUFFIX
            with_dir = output_root / f"{images_dir.name}-metadata-with-suffix-{stamp}"
            without_dir = output_root / f"{images_dir.name}-metadata-without-suffix-{stamp}"

            logger.info("Step 3: Generating metadata with and without suffix")
            self.generator.generate(
                assets, with_dir, images_cid, with_suffix=True, dual_version=True
            )
            self.generator.generate(
                assets, without_dir, images_cid, with_suffix=False, dual_version=True
            )

            logger.info("Step 4: Uploading metadata folders")
            with_suffix_cid = (
                await upload_directory_with_retry(
                    self.client, with_dir, self.policy, sleep=self.sleep
                )
            ).cid
            logger.info(f"Metadata (with suffix) CID: {with_suffix_cid}")
            without_suffix_cid = (
                await upload_directory_with_retry(
                    self.client, without_dir, self.policy, sleep=self.sleep
                )
            ).cid
            logger.info(f"Metadata (without suffix) CID: {without_suffix_cid}")

            shutil.rmtree(with_dir)
            logger.info(f"Removed working directory: {with_dir}")
            retained_dir = without_dir
        else:
            metadata_suffix = self.settings.METADATA_FILE_SUFFIX
            with_suffix = metadata_suffix != ""
            retained_dir = output_root / f"{images_dir.name}-metadata-{stamp}"

            logger.info(
                f"Step 3: Generating metadata "
                f"({'suffix ' + metadata_suffix if with_suffix else 'no suffix'})"
            )
            self.generator.generate(
                assets,
                retained_dir,
                images_cid,
                with_suffix=with_suffix,
                configured_suffix=metadata_suffix,
            )

            logger.info("Step 4: Uploading metadata folder")
            metadata_cid = (
                await upload_directory_with_retry(
                    self.client, retained_dir, self.policy, sleep=self.sleep
                )
            ).cid
            logger.info(f"Metadata folder CID: {metadata_cid}")
            if with_suffix:
                with_suffix_cid = metadata_cid
            else:
                without_suffix_cid = metadata_cid

        record = BatchRunRecord(
            images_cid=images_cid,
            metadata_with_suffix_cid=with_suffix_cid,
            metadata_without_suffix_cid=without_suffix_cid,
            metadata_suffix=metadata_suffix,
            both_versions=both_versions,
            total_files=len(assets),
            total_size_bytes=total_size,
            metadata_files=[
                MetadataFileEntry(
                    token_id=asset.token_id,
                    metadata_file_with_suffix=metadata_filename(
                        asset.token_label, True, both_versions, metadata_suffix
                    ),
                    metadata_file_without_suffix=asset.token_label,
                )
                for asset in assets
            ],
            elapsed_seconds=time.monotonic() - start_time,
        )

        logger.info("Step 5: Recording results")
        run_dir = self.recorder.create_run_directory("batch")
        self.recorder.record_batch(run_dir, record, metadata_dir=retained_dir)

        for convention, uri in record.base_uris.items():
            logger.info(f"Contract base URI ({convention.replace('_', ' ')}): {uri}")

        return record
