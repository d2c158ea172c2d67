"""Pydantic model for the outcome of one retried upload."""

from pydantic import BaseModel, Field


class UploadResult(BaseModel):
    """
    Result of a successful upload through the retry orchestrator.

    Consumed immediately by the workflow that issued the upload and never
    persisted on its own.

    Attributes:
        cid: Content identifier returned by the pinning service
        elapsed: Wall-clock seconds across all attempts and backoff sleeps
        attempts: Number of attempts used, including the successful one
    """

    cid: str = Field(..., min_length=1)
    elapsed: float = Field(..., ge=0)
    attempts: int = Field(..., ge=1)

    model_config = {"frozen": True}
