"""
PinningProvider abstraction layer for IPFS pinning backends.

Defines the interface for pinning providers (Pinata, offline mock)
allowing the CLI to swap between providers via configuration.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional


class PinningProvider(ABC):
    """
    Abstract base class for pinning providers.

    Every method performs exactly one remote operation. Retries and
    timeouts belong to the retry orchestrator, not to providers.

    Implementations:
    - PinataProvider: Pinata HTTP API
    - MockPinningProvider: Offline content addressing for dry runs and tests
    """

    @abstractmethod
    async def test_authentication(self) -> None:
        """
        Verify that the configured credentials are accepted.

        Raises:
            RemoteError: If authentication fails or the service is unreachable
        """
        pass

    @abstractmethod
    async def pin_file(self, file_path: Path, name: Optional[str] = None) -> str:
        """
        Upload and pin a single file.

        Args:
            file_path: Path of the file to upload
            name: Display name stored with the pin (defaults to the filename)

        Returns:
            str: CID of the file

        Raises:
            RemoteError: If the service rejects or fails the upload
            OSError: If the file cannot be read
        """
        pass

    @abstractmethod
    async def pin_directory(self, dir_path: Path) -> str:
        """
        Upload and pin a directory tree as one IPFS folder.

        Args:
            dir_path: Directory to upload; files keep their relative paths

        Returns:
            str: CID of the folder, so ipfs://<cid>/<relative path> resolves

        Raises:
            RemoteError: If the service rejects or fails the upload
            OSError: If a file cannot be read
        """
        pass

    @abstractmethod
    async def pin_by_cid(self, cid: str, name: Optional[str] = None) -> Dict:
        """
        Ask the service to pin content that already exists on IPFS.

        Returns:
            dict: Service response describing the queued pin job

        Raises:
            RemoteError: If the request fails
        """
        pass

    @abstractmethod
    async def list_pin_queue(self, status: str = "prechecking") -> Dict:
        """
        List pin-by-CID jobs in the given state.

        Returns:
            dict: {"count": int, "rows": [job, ...]}

        Raises:
            RemoteError: If the request fails
        """
        pass

    async def aclose(self) -> None:
        """Release network resources. No-op by default."""
        return None

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """
        Return provider identifier for logs and result files.

        Returns:
            str: Provider name - "pinata" or "mock"
        """
        pass
