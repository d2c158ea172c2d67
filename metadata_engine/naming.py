"""Token ID parsing and metadata filename conventions."""

import logging
import re

from .exceptions import InvalidFilenameError

logger = logging.getLogger(__name__)

DEFAULT_METADATA_SUFFIX = ""
SUPPORTED_METADATA_SUFFIXES = ("", ".json", ".yaml", ".yml")
DUAL_VERSION_SUFFIX = ".json"

_UNSIGNED_INT_RE = re.compile(r"^[0-9]+$")


def parse_token_id(stem: str) -> int:
    """
    Parse a filename stem as a non-negative integer token ID.

    Only plain ASCII digits are accepted, so "+1", "-3", " 7" and "1e3"
    are all rejected.

    Args:
        stem: Filename without its extension (e.g. "42" for "42.png")

    Returns:
        int: Parsed token ID

    Raises:
        InvalidFilenameError: If the stem is not an unsigned integer
    """
    if not _UNSIGNED_INT_RE.match(stem or ""):
        raise InvalidFilenameError(
            f"Invalid filename: '{stem}' is not an unsigned integer token ID"
        )
    return int(stem)


def resolve_metadata_suffix(raw: str | None) -> str:
    """Return raw if it is a supported suffix, otherwise the default with a warning."""
    if raw is None:
        return DEFAULT_METADATA_SUFFIX
    if raw in SUPPORTED_METADATA_SUFFIXES:
        return raw
    logger.warning(
        f"Unsupported metadata format: {raw!r}, using default: "
        f"{DEFAULT_METADATA_SUFFIX!r}"
    )
    return DEFAULT_METADATA_SUFFIX


def metadata_filename(
    token_label: str,
    with_suffix: bool,
    dual_version: bool,
    configured_suffix: str = DEFAULT_METADATA_SUFFIX,
) -> str:
    """
    Build the metadata filename for one token.

    Args:
        token_label: Token ID exactly as it appears in the image filename
        with_suffix: Whether this pass writes suffixed filenames
        dual_version: Whether this pass is part of a two-folder generation
        configured_suffix: Suffix used for suffixed single-version passes

    Returns:
        str: "<id>.json" for suffixed dual-version passes,
             "<id><configured_suffix>" for suffixed single-version passes,
             "<id>" otherwise
    """
    if not with_suffix:
        return token_label
    if dual_version:
        return f"{token_label}{DUAL_VERSION_SUFFIX}"
    return f"{token_label}{configured_suffix}"
