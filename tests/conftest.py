"""
Pytest configuration and fixtures
"""

from pathlib import Path

import pytest
from PIL import Image

from uploader.config import Settings
from uploader.services.mock_pinning_provider import MockPinningProvider
from uploader.services.provider_factory import reset_provider
from uploader.services.retry_orchestrator import RetryPolicy


def write_png(path: Path, color=(255, 0, 0), size=(8, 8)) -> Path:
    """Write a small real PNG image to path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color).save(path, format="PNG")
    return path


@pytest.fixture(autouse=True)
def clean_provider_singleton():
    """Never leak a cached provider between tests."""
    reset_provider()
    yield
    reset_provider()


@pytest.fixture
def test_settings(tmp_path):
    """Settings isolated from .env and the process environment, using tmp dirs."""
    return Settings(
        _env_file=None,
        USE_MOCK_PINNING=True,
        ASSETS_DIR=str(tmp_path / "assets"),
        OUTPUT_DIR=str(tmp_path / "output"),
        METADATA_FILE_SUFFIX="",
        MAX_RETRIES=3,
        RETRY_DELAY_MS=0,
        RETRY_JITTER_MS=0,
        UPLOAD_TIMEOUT_SECONDS=5,
    )


@pytest.fixture
def fast_policy():
    """Retry policy with no backoff delays."""
    return RetryPolicy(max_attempts=3, initial_delay_ms=0, max_jitter_ms=0, timeout_seconds=5)


@pytest.fixture
def mock_provider():
    return MockPinningProvider()


@pytest.fixture
def batch_images(test_settings):
    """Batch images directory holding 1.png and 2.png."""
    images_dir = Path(test_settings.ASSETS_DIR) / test_settings.BATCH_IMAGES_SUBDIR
    write_png(images_dir / "1.png", color=(255, 0, 0))
    write_png(images_dir / "2.png", color=(0, 0, 255))
    return images_dir


@pytest.fixture
def single_image(test_settings):
    """Single image directory holding one PNG."""
    image_dir = Path(test_settings.ASSETS_DIR) / test_settings.SINGLE_IMAGE_SUBDIR
    return write_png(image_dir / "7.png", color=(0, 255, 0))


@pytest.fixture
def png_factory():
    """Return the PNG writer so tests can create their own images."""
    return write_png
