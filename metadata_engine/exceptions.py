"""Custom exceptions for metadata generation module."""


class MetadataGenerationError(Exception):
    """Base exception for metadata generation errors."""

    pass


class InvalidFilenameError(MetadataGenerationError, ValueError):
    """Asset filename stem is not an unsigned integer token ID."""

    pass


class DuplicateTokenIdError(MetadataGenerationError):
    """Two assets in one generation pass resolve to the same token ID."""

    pass


class EmptyAssetListError(MetadataGenerationError):
    """Generation was requested for zero assets."""

    pass


class MetadataIntegrityError(MetadataGenerationError, OSError):
    """A written metadata file failed the read-back check."""

    pass
