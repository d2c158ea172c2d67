"""
Result Recorder Service

Persists the outcome of a workflow run: a structured result file, a
narrative README and, for batch runs, a copy of the retained metadata.
"""

import logging
import os
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from uploader.models import BatchRunRecord, SingleRunRecord

logger = logging.getLogger(__name__)

RESULTS_DIRNAME = "results"
RESULT_FILENAME = "upload-result.json"
README_FILENAME = "README.md"
METADATA_DIRNAME = "metadata"


def format_run_timestamp(now: datetime) -> str:
    """Filesystem-safe UTC timestamp with millisecond precision."""
    return now.strftime("%Y-%m-%dT%H-%M-%S-") + f"{now.microsecond // 1000:03d}Z"


class ResultRecorder:
    """
    Manages the output directory of each run.

    Layout: <output_root>/<mode>-upload-<timestamp>/
        results/upload-result.json
        README.md
        metadata/            (batch runs only)
    """

    def __init__(self, output_root: str | Path = "output", gateway: str = "gateway.pinata.cloud"):
        """
        Initialize ResultRecorder.

        Args:
            output_root: Directory that receives one subdirectory per run
            gateway: IPFS gateway host (or full URL) for README links
        """
        self.output_root = Path(output_root)
        self.gateway = gateway.rstrip("/")

    def gateway_url(self, cid: str) -> str:
        """HTTP gateway URL for a CID."""
        if self.gateway.startswith(("http://", "https://")):
            return f"{self.gateway}/ipfs/{cid}"
        return f"https://{self.gateway}/ipfs/{cid}"

    def create_run_directory(self, mode: str, now: Optional[datetime] = None) -> Path:
        """
        Create a uniquely named run directory with its results/ subdirectory.

        A numeric suffix is appended if a directory with the same timestamp
        already exists.

        Raises:
            OSError: If the directory cannot be created
        """
        now = now or datetime.now(timezone.utc)
        base_name = f"{mode}-upload-{format_run_timestamp(now)}"
        self.output_root.mkdir(parents=True, exist_ok=True)

        run_dir = self.output_root / base_name
        counter = 1
        while True:
            try:
                run_dir.mkdir()
                break
            except FileExistsError:
                counter += 1
                run_dir = self.output_root / f"{base_name}-{counter}"

        (run_dir / RESULTS_DIRNAME).mkdir()
        logger.info(f"Created run directory: {run_dir}")
        return run_dir

    def record_batch(
        self,
        run_dir: Path,
        record: BatchRunRecord,
        metadata_dir: Optional[Path] = None,
    ) -> Path:
        """
        Persist a batch run.

        The result file is written last, so its presence marks a complete record.

        Returns:
            Path: Path of results/upload-result.json

        Raises:
            OSError: If any write or copy fails
        """
        if metadata_dir is not None:
            self.copy_metadata(metadata_dir, run_dir / METADATA_DIRNAME)

        self._write_text_atomic(run_dir / README_FILENAME, self.render_batch_readme(record))
        result_path = self._write_record(run_dir, record)
        logger.info(f"Results saved to: {run_dir}")
        return result_path

    def record_single(self, run_dir: Path, record: SingleRunRecord) -> Path:
        """
        Persist a single-asset run.

        Returns:
            Path: Path of results/upload-result.json

        Raises:
            OSError: If any write fails
        """
        self._write_text_atomic(run_dir / README_FILENAME, self.render_single_readme(record))
        result_path = self._write_record(run_dir, record)
        logger.info(f"Results saved to: {run_dir}")
        return result_path

    def copy_metadata(self, source_dir: Path, dest_dir: Path) -> list[Path]:
        """
        Copy every file of source_dir into a fresh dest_dir.

        Raises:
            OSError: If source_dir is missing or a copy fails
        """
        source = Path(source_dir)
        if not source.is_dir():
            raise FileNotFoundError(f"Metadata directory not found: {source}")

        if dest_dir.exists():
            shutil.rmtree(dest_dir)
        dest_dir.mkdir(parents=True)

        copied = []
        for src_path in sorted(source.iterdir()):
            if src_path.is_file():
                dest_path = dest_dir / src_path.name
                shutil.copy2(src_path, dest_path)
                copied.append(dest_path)
                logger.debug(f"Copied metadata file: {dest_path}")

        logger.info(f"Metadata folder saved to: {dest_dir} ({len(copied)} files)")
        return copied

    def render_batch_readme(self, record: BatchRunRecord) -> str:
        """Narrative summary of a batch run."""
        with_cid = record.metadata_with_suffix_cid
        without_cid = record.metadata_without_suffix_cid

        usage = []
        if with_cid:
            usage.append(
                f"- For contracts expecting `{record.metadata_suffix or '.json'}` "
                f"suffixed token URIs: use `ipfs://{with_cid}/`"
            )
        if without_cid:
            usage.append(f"- For contracts without a suffix: use `ipfs://{without_cid}/`")

        gateways = [f"- Images: {self.gateway_url(record.images_cid)}/"]
        if with_cid:
            gateways.append(f"- Metadata with suffix: {self.gateway_url(with_cid)}/")
        if without_cid:
            gateways.append(f"- Metadata without suffix: {self.gateway_url(without_cid)}/")

        return (
            "# Batch Upload Results\n"
            "\n"
            "## Upload Information\n"
            f"- **Timestamp**: {record.timestamp}\n"
            f"- **Images CID**: `{record.images_cid}`\n"
            f"- **Metadata with suffix CID**: `{with_cid or 'N/A'}`\n"
            f"- **Metadata without suffix CID**: `{without_cid or 'N/A'}`\n"
            f"- **Total files**: {record.total_files}\n"
            "\n"
            "## Usage\n"
            + "\n".join(usage)
            + "\n"
            "\n"
            "## Gateway Links\n"
            + "\n".join(gateways)
            + "\n"
            "\n"
            "## Files\n"
            f"- Images are available at: `ipfs://{record.images_cid}/`\n"
            "- Metadata files are available at the respective CIDs above.\n"
            "- Local metadata files are saved in the `metadata/` folder for reference.\n"
        )

    def render_single_readme(self, record: SingleRunRecord) -> str:
        """Narrative summary of a single-asset run."""
        return (
            "# Single File Upload Results\n"
            "\n"
            "## Upload Information\n"
            f"- **Timestamp**: {record.timestamp}\n"
            f"- **Image file**: {record.image_file}\n"
            f"- **Image CID**: `{record.image_cid}`\n"
            f"- **Metadata CID**: `{record.metadata_cid}`\n"
            f"- **Token ID**: {record.token_id}\n"
            "\n"
            "## Usage\n"
            f"- The Token URI for this NFT is: `{record.metadata_url}`\n"
            "\n"
            "## Files\n"
            f"- Image is available at: `{record.gateway_image_url}`\n"
            f"- Metadata is available at: `{record.gateway_metadata_url}`\n"
        )

    def _write_record(self, run_dir: Path, record: BaseModel) -> Path:
        result_path = run_dir / RESULTS_DIRNAME / RESULT_FILENAME
        result_path.parent.mkdir(parents=True, exist_ok=True)
        self._write_text_atomic(result_path, record.model_dump_json(indent=2))
        logger.info(f"Upload result saved to: {result_path}")
        return result_path

    @staticmethod
    def _write_text_atomic(path: Path, content: str) -> None:
        """Write to a temporary sibling, fsync, then rename over path."""
        tmp_path = path.with_name(f".{path.name}.tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            tmp_path.unlink(missing_ok=True)
            raise
