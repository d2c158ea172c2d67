"""NFT asset and metadata uploader for IPFS pinning services."""

__version__ = "1.0.0"
