"""Recursive folder size inspection."""

import os
from pathlib import Path


def calculate_folder_size(dir_path: str | Path) -> int:
    """Sum the byte size of every regular file under dir_path.

    Args:
        dir_path: Directory to inspect.

    Returns:
        Total size in bytes.

    Raises:
        OSError: If any entry cannot be read. The whole inspection aborts.
    """
    total_size = 0
    with os.scandir(dir_path) as entries:
        for entry in entries:
            if entry.is_file():
                total_size += entry.stat().st_size
            elif entry.is_dir():
                total_size += calculate_folder_size(entry.path)
    return total_size


def format_size(num_bytes: int) -> str:
    """Render a byte count as B, KB or MB."""
    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.2f} KB"
    return f"{num_bytes / 1024 / 1024:.2f} MB"
