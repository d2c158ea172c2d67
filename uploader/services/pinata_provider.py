"""
PinataProvider - Pinata pinning API over httpx.

Implements PinningProvider against the Pinata v1 REST API
(pinFileToIPFS, pinByHash, pinJobs, testAuthentication).
"""

import json
import logging
import mimetypes
from pathlib import Path
from typing import Any, Dict, Optional

import httpx

from uploader.errors import RemoteError, ValidationError
from .pinning_provider import PinningProvider

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.pinata.cloud"
CID_VERSION = 1


def _guess_mime_type(filename: str) -> str:
    mime_type, _ = mimetypes.guess_type(filename)
    return mime_type or "application/octet-stream"


class PinataProvider(PinningProvider):
    """
    Pinning provider backed by the Pinata HTTP API.

    Authenticates with a JWT when one is configured, otherwise with the
    legacy API key / secret header pair.
    """

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        jwt: Optional[str] = None,
        api_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        timeout: float = 300.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize PinataProvider.

        Args:
            api_url: Pinata API base URL
            jwt: Pinata JWT (preferred)
            api_key: Legacy API key, used with secret_key when no JWT is set
            secret_key: Legacy API secret
            timeout: httpx timeout in seconds for a single request
            transport: Optional httpx transport (tests inject a MockTransport)

        Raises:
            ValueError: If no usable credentials are provided
        """
        if jwt:
            headers = {"Authorization": f"Bearer {jwt}"}
        elif api_key and secret_key:
            headers = {
                "pinata_api_key": api_key,
                "pinata_secret_api_key": secret_key,
            }
        else:
            raise ValueError(
                "PinataProvider requires PINATA_JWT or both "
                "PINATA_API_KEY and PINATA_SECRET_KEY."
            )

        self.base_url = api_url.rstrip("/")
        self.http_client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )
        logger.info(f"PinataProvider initialized for {self.base_url}")

    @property
    def provider_name(self) -> str:
        """Return provider identifier."""
        return "pinata"

    async def test_authentication(self) -> None:
        """Call /data/testAuthentication; raises RemoteError on failure."""
        await self._request("GET", "/data/testAuthentication")
        logger.info("Pinata authentication successful")

    async def pin_file(self, file_path: Path, name: Optional[str] = None) -> str:
        """Upload a single file with pinFileToIPFS and return its CID."""
        path = Path(file_path)
        display_name = name or path.name
        files = [("file", (display_name, path.read_bytes(), _guess_mime_type(display_name)))]
        payload = await self._request(
            "POST",
            "/pinning/pinFileToIPFS",
            files=files,
            data=self._pin_form(display_name),
        )
        return self._extract_cid(payload)

    async def pin_directory(self, dir_path: Path) -> str:
        """
        Upload a directory with pinFileToIPFS and return the folder CID.

        Every file becomes one multipart part named "<dir name>/<relative path>",
        which Pinata turns into a single IPFS folder.
        """
        root = Path(dir_path)
        files = []
        for file_path in sorted(p for p in root.rglob("*") if p.is_file()):
            relative = file_path.relative_to(root).as_posix()
            files.append(
                (
                    "file",
                    (
                        f"{root.name}/{relative}",
                        file_path.read_bytes(),
                        _guess_mime_type(file_path.name),
                    ),
                )
            )

        if not files:
            raise ValidationError(
                f"Directory contains no files to upload: {root}",
                details={"path": str(root)},
            )

        logger.info(f"Sending {len(files)} files from {root} to Pinata")
        payload = await self._request(
            "POST",
            "/pinning/pinFileToIPFS",
            files=files,
            data=self._pin_form(root.name),
        )
        return self._extract_cid(payload)

    async def pin_by_cid(self, cid: str, name: Optional[str] = None) -> Dict:
        """Queue an existing CID for pinning with pinByHash."""
        return await self._request(
            "POST",
            "/pinning/pinByHash",
            json={"hashToPin": cid, "pinataMetadata": {"name": name or cid}},
        )

    async def list_pin_queue(self, status: str = "prechecking") -> Dict:
        """List pinByHash jobs in the given state."""
        return await self._request("GET", "/pinning/pinJobs", params={"status": status})

    async def aclose(self) -> None:
        """Close the underlying httpx client."""
        await self.http_client.aclose()

    def translate_error(self, ex: Exception) -> RemoteError:
        """Translate an httpx exception into a RemoteError."""
        details: Dict[str, Any] = {
            "provider": "pinata",
            "exception": type(ex).__name__,
            "message": str(ex),
        }

        if isinstance(ex, httpx.HTTPStatusError):
            status_code = ex.response.status_code
            details["response"] = ex.response.text[:500]
            if status_code in (401, 403):
                message = "Pinata authentication failed"
            elif status_code == 429:
                message = "Pinata rate limit or quota exceeded"
            elif status_code >= 500:
                message = f"Pinata server error ({status_code})"
            else:
                message = f"Pinata rejected the request ({status_code})"
            return RemoteError(message, status_code=status_code, details=details)

        if isinstance(ex, httpx.TimeoutException):
            return RemoteError(f"Request to Pinata timed out: {ex}", details=details)

        return RemoteError(f"Network error talking to Pinata: {ex}", details=details)

    async def _request(self, method: str, url: str, **kwargs: Any) -> Dict:
        try:
            response = await self.http_client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise self.translate_error(e) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise RemoteError(
                f"Malformed response from Pinata: {e}",
                status_code=response.status_code,
                details={"provider": "pinata", "response": response.text[:500]},
            ) from e

        if not isinstance(payload, dict):
            raise RemoteError(
                "Malformed response from Pinata: expected a JSON object",
                status_code=response.status_code,
                details={"provider": "pinata", "response": response.text[:500]},
            )
        return payload

    @staticmethod
    def _pin_form(name: str) -> Dict[str, str]:
        return {
            "pinataMetadata": json.dumps({"name": name}),
            "pinataOptions": json.dumps({"cidVersion": CID_VERSION}),
        }

    @staticmethod
    def _extract_cid(payload: Dict) -> str:
        cid = payload.get("IpfsHash")
        if not cid or not isinstance(cid, str):
            raise RemoteError(
                "Malformed response from Pinata: missing IpfsHash",
                details={"provider": "pinata", "response": payload},
            )
        return cid
