"""Deterministic NFT metadata file generation."""

import json
import logging
import os
import shutil
from pathlib import Path
from typing import Callable, Optional, Sequence

from .exceptions import (
    DuplicateTokenIdError,
    EmptyAssetListError,
    MetadataIntegrityError,
)
from .folder_size import calculate_folder_size, format_size
from .models import AssetFile, Attribute, MetadataRecord
from .naming import DEFAULT_METADATA_SUFFIX, metadata_filename

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION_NAME = "MetaCore"
DEFAULT_DESCRIPTION = "A unique member of the MetaCore collection."
ID_TRAIT_TYPE = "ID"


def request_filesystem_sync() -> None:
    """Ask the OS to flush filesystem buffers. Failures are only logged."""
    try:
        os.sync()
        logger.info("Filesystem sync completed")
    except (AttributeError, OSError) as e:
        logger.warning(f"Filesystem sync unavailable: {e}")


class MetadataGenerator:
    """Generates one metadata file per asset into a clean target directory."""

    def __init__(
        self,
        collection_name: str = DEFAULT_COLLECTION_NAME,
        description: str = DEFAULT_DESCRIPTION,
        post_write_hook: Optional[Callable[[], None]] = request_filesystem_sync,
    ) -> None:
        """Initialize the MetadataGenerator.

        Args:
            collection_name: Prefix of every token name ("<name> #<id>").
            description: Description shared by all records.
            post_write_hook: Called once after a successful pass. Exceptions
                it raises are logged and swallowed.
        """
        self.collection_name = collection_name
        self.description = description
        self.post_write_hook = post_write_hook

    def build_record(self, token_id: int, image_uri: str) -> MetadataRecord:
        """Build the metadata record for one token."""
        return MetadataRecord(
            name=f"{self.collection_name} #{token_id}",
            description=self.description,
            image=image_uri,
            attributes=[Attribute(trait_type=ID_TRAIT_TYPE, value=token_id)],
        )

    def generate(
        self,
        assets: Sequence[AssetFile],
        target_dir: str | Path,
        folder_cid: str,
        *,
        with_suffix: bool,
        dual_version: bool = False,
        configured_suffix: str = DEFAULT_METADATA_SUFFIX,
    ) -> list[Path]:
        """Write one metadata file per asset and verify every file afterwards.

        The target directory is removed and recreated, so files left over
        from a previous pass never end up in the new folder.

        Args:
            assets: Assets to describe, in output order.
            target_dir: Directory that will contain exactly len(assets) files.
            folder_cid: CID of the uploaded images folder.
            with_suffix: Whether filenames carry a suffix.
            dual_version: Whether this pass belongs to a two-folder run.
            configured_suffix: Suffix for suffixed single-version passes.

        Returns:
            Paths of the written files, in asset order.

        Raises:
            EmptyAssetListError: If assets is empty.
            DuplicateTokenIdError: If two assets share a token ID.
            MetadataIntegrityError: If a written file fails read-back.
            OSError: On filesystem failures.
        """
        self._validate_assets(assets)

        target = Path(target_dir)
        if target.exists():
            shutil.rmtree(target)
        target.mkdir(parents=True)

        written: list[Path] = []
        for asset in assets:
            record = self.build_record(
                asset.token_id, f"ipfs://{folder_cid}/{asset.filename}"
            )
            file_name = metadata_filename(
                asset.token_label, with_suffix, dual_version, configured_suffix
            )
            file_path = target / file_name
            with open(file_path, "w", encoding="utf-8") as f:
                f.write(record.to_json())
            written.append(file_path)
            logger.info(f"Created metadata file: {file_path}")

        self.verify(target, written)

        try:
            folder_size = calculate_folder_size(target)
            logger.info(
                f"Metadata folder size before upload: {format_size(folder_size)} "
                f"({folder_size} bytes)"
            )
        except OSError as e:
            logger.warning(f"Could not measure metadata folder {target}: {e}")

        self._run_post_write_hook()
        return written

    def verify(self, target_dir: Path, expected: Sequence[Path]) -> None:
        """Re-read every expected file and check the directory holds nothing else.

        Raises:
            MetadataIntegrityError: On a missing, empty, unreadable or
                non-JSON file, or an unexpected file count.
        """
        present = sorted(p.name for p in Path(target_dir).iterdir())
        if len(present) != len(expected):
            raise MetadataIntegrityError(
                f"Expected {len(expected)} metadata files in {target_dir}, "
                f"found {len(present)}"
            )

        for file_path in expected:
            try:
                content = file_path.read_text(encoding="utf-8")
            except OSError as e:
                raise MetadataIntegrityError(
                    f"Metadata file {file_path} is not readable: {e}"
                ) from e
            if not content:
                raise MetadataIntegrityError(f"Metadata file {file_path} is empty")
            try:
                json.loads(content)
            except ValueError as e:
                raise MetadataIntegrityError(
                    f"Metadata file {file_path} is not valid JSON: {e}"
                ) from e
            logger.debug(
                f"File {file_path} is readable, content length: {len(content)} bytes"
            )

        logger.info(f"Verified {len(expected)} metadata files in: {target_dir}")

    def _validate_assets(self, assets: Sequence[AssetFile]) -> None:
        if not assets:
            raise EmptyAssetListError("No assets to generate metadata for")

        seen: dict[int, str] = {}
        for asset in assets:
            if asset.token_id in seen:
                raise DuplicateTokenIdError(
                    f"Token ID {asset.token_id} is used by both "
                    f"{seen[asset.token_id]} and {asset.filename}"
                )
            seen[asset.token_id] = asset.filename

    def _run_post_write_hook(self) -> None:
        if self.post_write_hook is None:
            return
        try:
            self.post_write_hook()
        except Exception as e:
            logger.warning(f"Post-write hook failed: {e}")
