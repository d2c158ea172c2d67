"""Pydantic models for the durable record of a workflow run."""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field

from metadata_engine.models import MetadataRecord


def utc_timestamp() -> str:
    """Current UTC time as an RFC 3339 string."""
    return datetime.now(timezone.utc).isoformat()


class MetadataFileEntry(BaseModel):
    """Filenames generated for one token in a batch run."""

    token_id: int = Field(..., ge=0)
    metadata_file_with_suffix: str
    metadata_file_without_suffix: str


class BatchRunRecord(BaseModel):
    """
    Result file for a batch upload run.

    Written once to results/upload-result.json and never modified.
    """

    timestamp: str = Field(default_factory=utc_timestamp)
    mode: Literal["batch"] = "batch"
    images_cid: str
    metadata_with_suffix_cid: Optional[str] = Field(
        None,
        description="CID of the suffixed metadata folder, if one was uploaded",
    )
    metadata_without_suffix_cid: Optional[str] = Field(
        None,
        description="CID of the unsuffixed metadata folder, if one was uploaded",
    )
    metadata_suffix: str = Field(
        "",
        description="Suffix used by the suffixed folder",
    )
    both_versions: bool = False
    total_files: int = Field(..., ge=0)
    total_size_bytes: int = Field(0, ge=0)
    metadata_files: list[MetadataFileEntry] = Field(default_factory=list)
    elapsed_seconds: float = Field(0.0, ge=0)
    status: str = "completed"

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "timestamp": "2025-01-01T12:00:00.000000+00:00",
                    "mode": "batch",
                    "images_cid": "bafybeigdyrzt5sfp7udm7hu76uh7y26nf3efuylqabf3oclgtqy55fbzdi",
                    "metadata_with_suffix_cid": None,
                    "metadata_without_suffix_cid": "bafybeihkoviema7g3gxyt6la7vd5ho32ictqbilu3wnlo3rs7ewhnp7lly",
                    "metadata_suffix": "",
                    "both_versions": False,
                    "total_files": 2,
                    "status": "completed",
                }
            ]
        },
    }

    @property
    def base_uris(self) -> dict[str, str]:
        """Contract base URIs keyed by filename convention."""
        uris = {}
        if self.metadata_without_suffix_cid:
            uris["without_suffix"] = f"ipfs://{self.metadata_without_suffix_cid}/"
        if self.metadata_with_suffix_cid:
            uris["with_suffix"] = f"ipfs://{self.metadata_with_suffix_cid}/"
        return uris


class SingleRunRecord(BaseModel):
    """
    Result file for a single-asset upload run.

    Written once to results/upload-result.json and never modified.
    """

    timestamp: str = Field(default_factory=utc_timestamp)
    mode: Literal["single"] = "single"
    token_id: int = Field(..., ge=0)
    image_file: str
    image_cid: str
    metadata_cid: str
    image_url: str
    metadata_url: str
    gateway_image_url: str
    gateway_metadata_url: str
    metadata: MetadataRecord
    elapsed_seconds: float = Field(0.0, ge=0)
    status: str = "completed"
