"""
Application configuration using Pydantic Settings.

All environment variables are accessed through this config object.
Never use os.getenv() directly in business logic.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from metadata_engine.naming import resolve_metadata_suffix


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Pinata Configuration
    PINATA_JWT: Optional[str] = Field(
        default=None,
        description="Pinata JWT; takes precedence over the API key pair",
    )
    PINATA_API_KEY: Optional[str] = Field(
        default=None,
        description="Pinata API key",
    )
    PINATA_SECRET_KEY: Optional[str] = Field(
        default=None,
        description="Pinata API secret",
    )
    PINATA_API_URL: str = Field(
        default="https://api.pinata.cloud",
        description="Pinata API base URL",
    )
    PINATA_GATEWAY: str = Field(
        default="gateway.pinata.cloud",
        description="IPFS gateway host used for human-readable links",
    )
    USE_MOCK_PINNING: bool = Field(
        default=False,
        description="Use the offline mock provider instead of Pinata",
    )

    # Metadata Configuration
    METADATA_FILE_SUFFIX: str = Field(
        default="",
        description="Metadata filename suffix: '', '.json', '.yaml' or '.yml'",
    )
    COLLECTION_NAME: str = Field(
        default="MetaCore",
        description="Token name prefix",
    )
    COLLECTION_DESCRIPTION: str = Field(
        default="A unique member of the MetaCore collection.",
        description="Description written into every metadata record",
    )

    # Upload Configuration
    MAX_RETRIES: int = Field(
        default=3,
        ge=1,
        description="Total upload attempts",
    )
    RETRY_DELAY_MS: int = Field(
        default=5000,
        ge=0,
        description="Initial backoff delay in milliseconds",
    )
    RETRY_JITTER_MS: int = Field(
        default=1000,
        ge=0,
        description="Maximum random jitter added to each backoff delay",
    )
    UPLOAD_TIMEOUT_SECONDS: float = Field(
        default=300,
        gt=0,
        description="Hard timeout for a single upload attempt",
    )
    MAX_FILE_SIZE: int = Field(
        default=52428800,
        description="Per-image size above which a warning is logged (50MB)",
    )
    MAX_TOTAL_SIZE: int = Field(
        default=524288000,
        description="Collection size above which a warning is logged (500MB)",
    )

    # Storage Configuration
    ASSETS_DIR: str = Field(
        default="assets",
        description="Root directory holding input images",
    )
    BATCH_IMAGES_SUBDIR: str = Field(
        default="batch_images",
        description="Subdirectory of ASSETS_DIR used by batch mode",
    )
    SINGLE_IMAGE_SUBDIR: str = Field(
        default="image",
        description="Subdirectory of ASSETS_DIR used by single mode",
    )
    OUTPUT_DIR: str = Field(
        default="output",
        description="Directory receiving run results and metadata folders",
    )

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Root logging level",
    )

    @field_validator("METADATA_FILE_SUFFIX", mode="before")
    @classmethod
    def _supported_suffix(cls, value: Optional[str]) -> str:
        return resolve_metadata_suffix(value)


# Global settings instance
settings = Settings()
