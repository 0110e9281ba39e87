"""Shared fixtures for pipeline and server tests."""

import pytest

from fakes import RecordingRunner
from ordhook.exceptions import DownloadError


@pytest.fixture
def runner():
    return RecordingRunner()


@pytest.fixture
def download_error():
    return DownloadError("Download of https://x/y/img.png failed with HTTP 404",
                         url="https://x/y/img.png", status_code=404)
