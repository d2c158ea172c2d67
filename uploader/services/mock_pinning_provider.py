"""
MockPinningProvider - Offline stand-in for a pinning service.

Derives deterministic content addresses from SHA-256 digests of the
uploaded bytes so dry runs and tests behave like a content-addressed store.
"""

import asyncio
import base64
import hashlib
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

from uploader.errors import ValidationError
from .pinning_provider import PinningProvider

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192
CID_PREFIX = "bafy"


def compute_file_digest(file_path: Path) -> bytes:
    """SHA-256 digest of a file, read in chunks."""
    sha256 = hashlib.sha256()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            sha256.update(chunk)
    return sha256.digest()


def digest_to_cid(digest: bytes) -> str:
    """Render a digest as a lowercase base32 identifier shaped like a CIDv1."""
    return CID_PREFIX + base64.b32encode(digest).decode("ascii").lower().rstrip("=")


class MockPinningProvider(PinningProvider):
    """
    Mock pinning provider that never leaves the machine.

    Adds:
    - Deterministic CIDs: identical bytes always map to the same CID
    - Folder CIDs derived from sorted (relative path, file digest) pairs
    - Optional simulated latency per call
    - [MOCK-PINNING] prefixed logging for debugging
    """

    def __init__(self, latency_seconds: float = 0.0):
        """Initialize MockPinningProvider with an empty pin set."""
        self.latency_seconds = latency_seconds
        self.pins: Dict[str, str] = {}
        self.jobs: Dict[str, Dict] = {}
        logger.info("[MOCK-PINNING] MockPinningProvider initialized (no network access)")

    @property
    def provider_name(self) -> str:
        """Return provider identifier for logs and result files."""
        return "mock"

    async def test_authentication(self) -> None:
        """Always succeeds."""
        await self._simulate_latency()
        logger.info("[MOCK-PINNING] Authentication skipped")

    async def pin_file(self, file_path: Path, name: Optional[str] = None) -> str:
        """Return the content address of a single file."""
        path = Path(file_path)
        await self._simulate_latency()
        cid = digest_to_cid(compute_file_digest(path))
        self.pins[cid] = name or path.name
        logger.info(f"[MOCK-PINNING] Pinned file {path.name}: {cid}")
        return cid

    async def pin_directory(self, dir_path: Path) -> str:
        """Return the content address of a directory tree."""
        root = Path(dir_path)
        files = sorted(p for p in root.rglob("*") if p.is_file())
        if not files:
            raise ValidationError(
                f"Directory contains no files to upload: {root}",
                details={"path": str(root)},
            )

        await self._simulate_latency()
        folder_hash = hashlib.sha256()
        for file_path in files:
            relative = file_path.relative_to(root).as_posix()
            folder_hash.update(relative.encode("utf-8") + b"\0")
            folder_hash.update(compute_file_digest(file_path))

        cid = digest_to_cid(folder_hash.digest())
        self.pins[cid] = root.name
        logger.info(
            f"[MOCK-PINNING] Pinned folder {root.name} ({len(files)} files): {cid}"
        )
        return cid

    async def pin_by_cid(self, cid: str, name: Optional[str] = None) -> Dict:
        """Record a pin-by-CID job in the prechecking state."""
        await self._simulate_latency()
        job = {
            "id": str(uuid.uuid4()),
            "ipfs_pin_hash": cid,
            "name": name or cid,
            "status": "prechecking",
            "date_queued": datetime.now(timezone.utc).isoformat(),
        }
        self.jobs[job["id"]] = job
        logger.info(f"[MOCK-PINNING] Queued pin for {cid}")
        return job

    async def list_pin_queue(self, status: str = "prechecking") -> Dict:
        """Return recorded jobs in the given state."""
        await self._simulate_latency()
        rows = [job for job in self.jobs.values() if job["status"] == status]
        return {"count": len(rows), "rows": rows}

    async def _simulate_latency(self) -> None:
        if self.latency_seconds > 0:
            await asyncio.sleep(self.latency_seconds)
