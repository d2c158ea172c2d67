"""
Integration tests for the batch upload workflow.

Runs the full pipeline against the offline MockPinningProvider and checks
the metadata folders and result files it leaves on disk.
"""

import json
from pathlib import Path

import pytest

from uploader.errors import RemoteError, RetriesExhaustedError, ValidationError
from uploader.services.batch_workflow import BatchWorkflow
from uploader.services.mock_pinning_provider import MockPinningProvider


pytestmark = pytest.mark.integration


class FlakyFolderProvider(MockPinningProvider):
    """Mock provider whose first `failures` folder uploads fail."""

    def __init__(self, failures: int):
        super().__init__()
        self.failures = failures
        self.folder_calls = 0

    async def pin_directory(self, dir_path):
        self.folder_calls += 1
        if self.folder_calls <= self.failures:
            raise RemoteError("Pinata server error (503)", status_code=503)
        return await super().pin_directory(dir_path)


def find_run_dir(settings) -> Path:
    run_dirs = sorted(Path(settings.OUTPUT_DIR).glob("batch-upload-*"))
    assert len(run_dirs) == 1
    return run_dirs[0]


@pytest.mark.asyncio
async def test_batch_without_suffix(test_settings, batch_images, mock_provider):
    """1.png and 2.png produce metadata files 1 and 2 pointing at the images CID."""
    images_cid = await MockPinningProvider().pin_directory(batch_images)

    record = await BatchWorkflow(mock_provider, test_settings).run()

    assert record.images_cid == images_cid
    assert record.total_files == 2
    assert record.metadata_with_suffix_cid is None
    assert record.metadata_without_suffix_cid is not None

    run_dir = find_run_dir(test_settings)
    metadata_dir = run_dir / "metadata"
    assert sorted(p.name for p in metadata_dir.iterdir()) == ["1", "2"]
    for token_id in (1, 2):
        data = json.loads((metadata_dir / str(token_id)).read_text(encoding="utf-8"))
        assert data["name"] == f"MetaCore #{token_id}"
        assert data["image"] == f"ipfs://{images_cid}/{token_id}.png"
        assert data["attributes"] == [{"trait_type": "ID", "value": token_id}]

    result = json.loads((run_dir / "results" / "upload-result.json").read_text(encoding="utf-8"))
    assert result["mode"] == "batch"
    assert result["images_cid"] == images_cid
    assert result["status"] == "completed"
    assert (run_dir / "README.md").exists()


@pytest.mark.asyncio
async def test_batch_with_configured_suffix(test_settings, batch_images, mock_provider):
    settings = test_settings.model_copy(update={"METADATA_FILE_SUFFIX": ".json"})

    record = await BatchWorkflow(mock_provider, settings).run()

    assert record.metadata_with_suffix_cid is not None
    assert record.metadata_without_suffix_cid is None
    assert record.metadata_suffix == ".json"
    metadata_dir = find_run_dir(settings) / "metadata"
    assert sorted(p.name for p in metadata_dir.iterdir()) == ["1.json", "2.json"]


@pytest.mark.asyncio
async def test_batch_both_versions(test_settings, batch_images, mock_provider):
    """Dual mode uploads two folders and keeps only the unsuffixed one."""
    record = await BatchWorkflow(mock_provider, test_settings).run(
        both_versions=True
    )

    assert record.both_versions is True
    assert record.metadata_suffix == ".json"
    assert record.metadata_with_suffix_cid != record.metadata_without_suffix_cid
    assert record.base_uris == {
        "without_suffix": f"ipfs://{record.metadata_without_suffix_cid}/",
        "with_suffix": f"ipfs://{record.metadata_with_suffix_cid}/",
    }
    assert [entry.metadata_file_with_suffix for entry in record.metadata_files] == [
        "1.json",
        "2.json",
    ]

    output_dir = Path(test_settings.OUTPUT_DIR)
    assert not list(output_dir.glob("*-metadata-with-suffix-*"))
    assert len(list(output_dir.glob("*-metadata-without-suffix-*"))) == 1
    metadata_dir = find_run_dir(test_settings) / "metadata"
    assert sorted(p.name for p in metadata_dir.iterdir()) == ["1", "2"]


@pytest.mark.asyncio
async def test_batch_is_deterministic(test_settings, batch_images):
    first = await BatchWorkflow(MockPinningProvider(), test_settings).run()
    second = await BatchWorkflow(MockPinningProvider(), test_settings).run()

    assert first.images_cid == second.images_cid
    assert first.metadata_without_suffix_cid == second.metadata_without_suffix_cid


@pytest.mark.asyncio
async def test_batch_retries_transient_failures(test_settings, batch_images):
    provider = FlakyFolderProvider(failures=2)

    record = await BatchWorkflow(provider, test_settings).run()

    assert record.images_cid.startswith("bafy")
    assert provider.folder_calls == 4


@pytest.mark.asyncio
async def test_batch_gives_up_after_max_retries(test_settings, batch_images):
    provider = FlakyFolderProvider(failures=100)

    with pytest.raises(RetriesExhaustedError) as exc_info:
        await BatchWorkflow(provider, test_settings).run()

    assert exc_info.value.attempts == test_settings.MAX_RETRIES
    assert provider.folder_calls == test_settings.MAX_RETRIES
    assert not Path(test_settings.OUTPUT_DIR).exists()


@pytest.mark.asyncio
async def test_batch_missing_images_directory(test_settings, mock_provider):
    with pytest.raises(ValidationError, match="does not exist"):
        await BatchWorkflow(mock_provider, test_settings).run()

    assert mock_provider.pins == {}


@pytest.mark.asyncio
async def test_batch_directory_without_images(test_settings, mock_provider):
    images_dir = Path(test_settings.ASSETS_DIR) / test_settings.BATCH_IMAGES_SUBDIR
    images_dir.mkdir(parents=True)
    (images_dir / "notes.txt").write_text("not an image")

    with pytest.raises(ValidationError, match="No image files"):
        await BatchWorkflow(mock_provider, test_settings).run()
