"""
Unit tests for Settings and the error taxonomy.
"""

import pytest
from pydantic import ValidationError as SettingsValidationError

from metadata_engine import DuplicateTokenIdError, InvalidFilenameError, MetadataIntegrityError
from uploader.config import Settings
from uploader.errors import (
    EXIT_FAILURE,
    EXIT_REMOTE,
    EXIT_VALIDATION,
    RemoteError,
    RetriesExhaustedError,
    UploadTimeoutError,
    ValidationError,
    exit_code_for,
    format_error_report,
)


class TestSettings:
    """Tests for Settings defaults and validation."""

    def test_defaults(self, monkeypatch):
        for name in ("METADATA_FILE_SUFFIX", "MAX_RETRIES", "USE_MOCK_PINNING"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.METADATA_FILE_SUFFIX == ""
        assert settings.MAX_RETRIES == 3
        assert settings.RETRY_DELAY_MS == 5000
        assert settings.UPLOAD_TIMEOUT_SECONDS == 300
        assert settings.PINATA_GATEWAY == "gateway.pinata.cloud"
        assert settings.USE_MOCK_PINNING is False

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("METADATA_FILE_SUFFIX", ".json")
        monkeypatch.setenv("MAX_RETRIES", "5")

        settings = Settings(_env_file=None)

        assert settings.METADATA_FILE_SUFFIX == ".json"
        assert settings.MAX_RETRIES == 5

    def test_unsupported_suffix_falls_back_to_default(self):
        settings = Settings(_env_file=None, METADATA_FILE_SUFFIX=".txt")
        assert settings.METADATA_FILE_SUFFIX == ""

    def test_max_retries_must_be_positive(self):
        with pytest.raises(SettingsValidationError):
            Settings(_env_file=None, MAX_RETRIES=0)


class TestErrorTaxonomy:
    """Tests for exit codes and error reports."""

    @pytest.mark.parametrize(
        "exc,expected",
        [
            (ValidationError("no images"), EXIT_VALIDATION),
            (InvalidFilenameError("bad"), EXIT_VALIDATION),
            (DuplicateTokenIdError("dup"), EXIT_VALIDATION),
            (RemoteError("503"), EXIT_REMOTE),
            (UploadTimeoutError("Upload", 300), EXIT_REMOTE),
            (RetriesExhaustedError("Upload", 3, RemoteError("503")), EXIT_REMOTE),
            (MetadataIntegrityError("unreadable"), EXIT_FAILURE),
            (PermissionError("denied"), EXIT_FAILURE),
            (RuntimeError("boom"), EXIT_FAILURE),
        ],
    )
    def test_exit_code_for(self, exc, expected):
        assert exit_code_for(exc) == expected

    def test_timeout_error_is_retryable_remote_error(self):
        error = UploadTimeoutError("Folder upload", 300)
        assert isinstance(error, RemoteError)
        assert "timed out after 300 seconds" in str(error)

    def test_report_for_exhausted_retries(self):
        report = format_error_report(RetriesExhaustedError("Upload", 3, RemoteError("503")))

        assert report["category"] == "remote"
        assert report["exit_code"] == EXIT_REMOTE
        assert report["details"]["attempts"] == 3

    def test_report_categories(self):
        assert format_error_report(ValidationError("x"))["category"] == "validation"
        assert format_error_report(FileNotFoundError("x"))["category"] == "filesystem"
        assert format_error_report(RuntimeError("x"))["category"] == "unexpected"
