"""NFT metadata generation module."""

from .exceptions import (
    DuplicateTokenIdError,
    EmptyAssetListError,
    InvalidFilenameError,
    MetadataGenerationError,
    MetadataIntegrityError,
)
from .folder_size import calculate_folder_size, format_size
from .metadata_generator import MetadataGenerator, request_filesystem_sync
from .models import AssetFile, Attribute, MetadataRecord
from .naming import (
    SUPPORTED_METADATA_SUFFIXES,
    metadata_filename,
    parse_token_id,
    resolve_metadata_suffix,
)

__all__ = [
    "AssetFile",
    "Attribute",
    "MetadataRecord",
    "MetadataGenerator",
    "request_filesystem_sync",
    "calculate_folder_size",
    "format_size",
    "metadata_filename",
    "parse_token_id",
    "resolve_metadata_suffix",
    "SUPPORTED_METADATA_SUFFIXES",
    "MetadataGenerationError",
    "InvalidFilenameError",
    "DuplicateTokenIdError",
    "EmptyAssetListError",
    "MetadataIntegrityError",
]
