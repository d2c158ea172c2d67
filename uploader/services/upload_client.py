"""
Upload Client

Single-attempt uploads of files and folders through a PinningProvider,
with duration and throughput logging.
"""

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

from metadata_engine.folder_size import calculate_folder_size, format_size
from uploader.errors import RemoteError, UploaderError
from .pinning_provider import PinningProvider

logger = logging.getLogger(__name__)


def compute_throughput(size_bytes: int, elapsed_seconds: float) -> float:
    """
    Upload throughput in MB/s.

    Returns 0.0 when the elapsed time is not measurable.
    """
    if elapsed_seconds <= 0:
        return 0.0
    return size_bytes / 1024 / 1024 / elapsed_seconds


class UploadClient:
    """
    Wraps one logical upload to the pinning provider.

    No retries happen here; wrap calls with the retry orchestrator.
    Provider failures always surface as RemoteError, local file errors
    as OSError.
    """

    def __init__(self, provider: PinningProvider):
        self.provider = provider

    async def upload_file(self, file_path: str | Path, name: Optional[str] = None) -> str:
        """
        Upload a single file and return its CID.

        Args:
            file_path: File to upload
            name: Optional display name for the pin

        Returns:
            str: CID of the file

        Raises:
            RemoteError: If the provider fails
            OSError: If the file cannot be read
        """
        path = Path(file_path)
        file_size = path.stat().st_size

        logger.info(f"--- Uploading single file to {self.provider.provider_name}: {path} ---")
        logger.info(f"Upload started at: {datetime.now().strftime('%H:%M:%S')}")
        logger.info(f"File size: {file_size / 1024 / 1024:.2f} MB")

        start_time = time.monotonic()
        cid = await self._call(self.provider.pin_file(path, name), path)
        elapsed = time.monotonic() - start_time

        logger.info(f"File uploaded successfully! CID: {cid}")
        logger.info(f"Upload completed in: {elapsed:.2f} seconds")
        logger.info(f"Upload speed: {compute_throughput(file_size, elapsed):.2f} MB/s")
        return cid

    async def upload_directory(self, dir_path: str | Path) -> str:
        """
        Upload a directory as one IPFS folder and return the folder CID.

        Raises:
            RemoteError: If the provider fails
            OSError: If a file cannot be read
        """
        path = Path(dir_path)

        logger.info(f"--- Uploading folder to {self.provider.provider_name}: {path} ---")
        logger.info(f"Upload started at: {datetime.now().strftime('%H:%M:%S')}")
        log_folder_size(path)

        start_time = time.monotonic()
        cid = await self._call(self.provider.pin_directory(path), path)
        elapsed = time.monotonic() - start_time

        logger.info(f"Folder uploaded successfully! CID: {cid}")
        logger.info(f"Upload completed in: {elapsed:.2f} seconds")
        return cid

    async def _call(self, pending, path: Path) -> str:
        try:
            return await pending
        except (UploaderError, OSError):
            raise
        except Exception as e:
            logger.error(f"Unexpected provider failure for {path}: {e}")
            raise RemoteError(
                f"Upload failed: {e}",
                details={"path": str(path), "exception": type(e).__name__},
            ) from e


def log_folder_size(path: Path) -> None:
    """Log the size of a folder; inspection failures are only warnings."""
    try:
        folder_size = calculate_folder_size(path)
        logger.info(f"Folder size: {format_size(folder_size)} ({folder_size} bytes)")
    except OSError as e:
        logger.warning(f"Could not measure folder {path}: {e}")
