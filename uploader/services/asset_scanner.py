"""
Asset discovery for the upload workflows.

Lists image files in an input directory and turns them into AssetFiles.
"""

import logging
from pathlib import Path
from typing import Sequence

from metadata_engine.models import AssetFile
from uploader.errors import ValidationError

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif")


def require_directory(directory: Path, description: str) -> Path:
    """
    Ensure an input directory exists.

    Raises:
        ValidationError: If the path is missing or not a directory
    """
    if not directory.is_dir():
        raise ValidationError(
            f"{description} does not exist: {directory}",
            details={"path": str(directory)},
        )
    return directory


def list_image_files(directory: Path) -> list[Path]:
    """
    Return image files directly inside directory, sorted by filename.

    Hidden files and subdirectories are ignored; extensions are matched
    case-insensitively.
    """
    return sorted(
        (
            path
            for path in directory.iterdir()
            if path.is_file()
            and not path.name.startswith(".")
            and path.suffix.lower() in IMAGE_EXTENSIONS
        ),
        key=lambda p: p.name,
    )


def scan_assets(directory: Path) -> list[AssetFile]:
    """
    Build AssetFiles for every image in directory, ordered by token ID.

    Raises:
        ValidationError: If the directory holds no images
        InvalidFilenameError: If an image stem is not an unsigned integer
    """
    image_files = list_image_files(directory)
    if not image_files:
        raise ValidationError(
            f"No image files found in {directory}",
            details={"path": str(directory), "extensions": list(IMAGE_EXTENSIONS)},
        )

    assets = [AssetFile.from_path(path) for path in image_files]
    assets.sort(key=lambda asset: (asset.token_id, asset.filename))
    logger.info(f"Found {len(assets)} image files in {directory}")
    return assets


def select_first_image(directory: Path) -> Path:
    """
    Pick the first image in filename order.

    Raises:
        ValidationError: If the directory holds no images
    """
    image_files = list_image_files(directory)
    if not image_files:
        raise ValidationError(
            f"No image files found in {directory}",
            details={"path": str(directory), "extensions": list(IMAGE_EXTENSIONS)},
        )
    return image_files[0]


def collect_size_warnings(
    assets: Sequence[AssetFile], max_file_size: int, max_total_size: int
) -> tuple[int, list[str]]:
    """
    Check asset sizes against the configured limits.

    Limits never block an upload; they only produce warnings.

    Returns:
        tuple: (total size in bytes, list of warning messages)
    """
    total_size = 0
    warnings: list[str] = []

    for asset in assets:
        total_size += asset.size_bytes
        if asset.size_bytes > max_file_size:
            warnings.append(
                f"File {asset.filename} is too large "
                f"({asset.size_bytes / 1024 / 1024:.2f} MB)"
            )

    if total_size > max_total_size:
        warnings.append(f"Total file size is too large ({total_size / 1024 / 1024:.2f} MB)")

    return total_size, warnings
