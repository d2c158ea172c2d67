"""Pydantic models for NFT assets and their metadata records."""

from pathlib import Path
from typing import Union

from pydantic import BaseModel, Field

from .naming import parse_token_id


class AssetFile(BaseModel):
    """An image file discovered on disk, identified by its numeric token ID."""

    path: Path = Field(..., description="Path to the image file")
    filename: str = Field(..., description="Image filename including extension")
    token_label: str = Field(
        ...,
        description="Filename stem exactly as written (e.g. '007')",
    )
    token_id: int = Field(..., ge=0, description="Stem parsed as an unsigned integer")
    size_bytes: int = Field(..., ge=0, description="File size in bytes")

    model_config = {"frozen": True}

    @classmethod
    def from_path(cls, path: Path) -> "AssetFile":
        """
        Build an AssetFile from an image path.

        Raises:
            InvalidFilenameError: If the stem is not an unsigned integer
            OSError: If the file cannot be stat'ed
        """
        path = Path(path)
        token_id = parse_token_id(path.stem)
        return cls(
            path=path,
            filename=path.name,
            token_label=path.stem,
            token_id=token_id,
            size_bytes=path.stat().st_size,
        )


class Attribute(BaseModel):
    """A single ERC-721 metadata trait."""

    trait_type: str
    value: Union[int, str]


class MetadataRecord(BaseModel):
    """
    ERC-721 style token metadata.

    Field order is the serialization order.
    """

    name: str = Field(..., description="Display name, e.g. 'MetaCore #1'")
    description: str
    image: str = Field(..., description="ipfs:// URI of the token image")
    attributes: list[Attribute] = Field(default_factory=list)

    def to_json(self) -> str:
        """Serialize with 2-space indentation."""
        return self.model_dump_json(indent=2)
