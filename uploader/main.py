"""
NFT IPFS Uploader

Command-line entry point. Every command configures logging, connects to the
pinning provider, verifies authentication, runs its operation and exits
with a code that reflects the failure category.
"""

import asyncio
import json
import logging
import tempfile
import time
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

import typer

from uploader.config import Settings, settings
from uploader.errors import ValidationError, exit_code_for, format_error_report
from uploader.services import (
    BatchWorkflow,
    PinningProvider,
    RetryPolicy,
    SingleWorkflow,
    UploadClient,
    get_pinning_provider,
    reset_provider,
    upload_file_with_retry,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
TEST_FILE_CONTENT = "Hello Pinata! This is a test file."

T = TypeVar("T")

app = typer.Typer(
    name="nft-uploader",
    help="Upload NFT images and metadata to IPFS through a pinning service.",
    no_args_is_help=True,
)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        force=True,
    )


async def _with_provider(
    config: Settings, action: Callable[[PinningProvider], Awaitable[T]]
) -> T:
    try:
        provider = get_pinning_provider(config)
    except ValueError as e:
        raise ValidationError(str(e)) from e

    try:
        logger.info(f"Testing {provider.provider_name} authentication")
        await provider.test_authentication()
        logger.info("Authentication successful")
        return await action(provider)
    finally:
        await provider.aclose()
        reset_provider()


def _execute(command: str, action: Callable[[PinningProvider], Awaitable[T]]) -> T:
    """Run one command to completion, turning failures into exit codes."""
    configure_logging(settings.LOG_LEVEL)
    start_time = time.monotonic()
    logger.info(f"Starting {command}")

    try:
        result = asyncio.run(_with_provider(settings, action))
        logger.info(f"{command} completed successfully")
        return result
    except Exception as e:
        report = format_error_report(e)
        logger.error(f"{command} failed ({report['category']}): {report['message']}")
        logger.debug(json.dumps(report, indent=2, default=str))
        raise typer.Exit(code=exit_code_for(e)) from e
    finally:
        logger.info(f"Total time: {time.monotonic() - start_time:.2f} seconds")


@app.command("batch")
def batch(
    both_versions: bool = typer.Option(
        False,
        "--both-versions",
        help="Upload metadata both with a .json suffix and without any suffix.",
    ),
):
    """
    Upload the batch images folder, then generate and upload its metadata.
    """

    async def action(provider: PinningProvider):
        return await BatchWorkflow(provider, settings).run(both_versions=both_versions)

    record = _execute("Batch upload", action)
    typer.echo(f"Images CID: {record.images_cid}")
    for convention, uri in record.base_uris.items():
        typer.echo(f"Base URI ({convention.replace('_', ' ')}): {uri}")


@app.command("single")
def single(
    token_id: Optional[int] = typer.Option(
        None,
        "--token-id",
        min=0,
        help="Token ID written into the metadata (default: 1).",
    ),
):
    """
    Upload one image and its metadata file.
    """

    async def action(provider: PinningProvider):
        return await SingleWorkflow(provider, settings).run(token_id=token_id)

    record = _execute("Single upload", action)
    typer.echo(f"Image CID: {record.image_cid}")
    typer.echo(f"Token URI: {record.metadata_url}")


@app.command("test")
def test_upload():
    """
    Upload a small text file to check credentials and connectivity.
    """

    async def action(provider: PinningProvider):
        with tempfile.TemporaryDirectory() as tmp_dir:
            test_file = Path(tmp_dir) / "test.txt"
            test_file.write_text(TEST_FILE_CONTENT, encoding="utf-8")
            result = await upload_file_with_retry(
                UploadClient(provider),
                test_file,
                RetryPolicy.from_settings(settings),
                name=test_file.name,
            )
        return result.cid

    cid = _execute("Test upload", action)
    typer.echo(f"Test file CID: {cid}")


@app.command("pin")
def pin(
    cid: str = typer.Argument(..., help="CID of content already available on IPFS."),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Display name for the pin."),
):
    """
    Pin existing IPFS content by its CID.
    """

    async def action(provider: PinningProvider):
        return await provider.pin_by_cid(cid, name)

    job = _execute("Pin by CID", action)
    typer.echo(json.dumps(job, indent=2, default=str))


@app.command("queue")
def queue(
    status: str = typer.Option("prechecking", "--status", help="Pin job state to list."),
):
    """
    List pin-by-CID jobs waiting in the pinning queue.
    """

    async def action(provider: PinningProvider):
        return await provider.list_pin_queue(status)

    jobs = _execute("Pin queue listing", action)
    typer.echo(f"{jobs.get('count', 0)} job(s) in state '{status}'")
    for job in jobs.get("rows", []):
        typer.echo(json.dumps(job, default=str))


if __name__ == "__main__":
    app()
