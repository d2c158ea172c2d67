"""
Provider factory for pinning backend selection.

Returns appropriate PinningProvider based on USE_MOCK_PINNING configuration.
"""

import logging

from uploader.config import Settings, settings as default_settings
from .mock_pinning_provider import MockPinningProvider
from .pinata_provider import PinataProvider
from .pinning_provider import PinningProvider

logger = logging.getLogger(__name__)

# Singleton provider instance
_provider_instance: PinningProvider | None = None


def get_pinning_provider(settings: Settings | None = None) -> PinningProvider:
    """
    Get the configured pinning provider instance.

    Args:
        settings: Settings to build the provider from (default: global settings)

    Returns:
        PinningProvider: MockPinningProvider if USE_MOCK_PINNING=true,
                         PinataProvider otherwise

    Raises:
        ValueError: If Pinata is selected but no credentials are configured
    """
    global _provider_instance

    if _provider_instance is not None:
        return _provider_instance

    settings = settings or default_settings

    if settings.USE_MOCK_PINNING:
        logger.info(
            "Initializing MockPinningProvider (USE_MOCK_PINNING=true) - "
            "offline content addressing, nothing is uploaded"
        )
        _provider_instance = MockPinningProvider()
    else:
        _provider_instance = PinataProvider(
            api_url=settings.PINATA_API_URL,
            jwt=settings.PINATA_JWT,
            api_key=settings.PINATA_API_KEY,
            secret_key=settings.PINATA_SECRET_KEY,
            timeout=settings.UPLOAD_TIMEOUT_SECONDS,
        )

    return _provider_instance


def reset_provider() -> None:
    """
    Reset the provider singleton.

    Clears the cached provider instance, allowing a fresh
    provider to be created on next get_pinning_provider() call.
    """
    global _provider_instance
    _provider_instance = None
    logger.debug("Provider singleton reset")
