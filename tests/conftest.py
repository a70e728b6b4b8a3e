"""Shared fixtures: sample APOD payloads and an isolated environment."""

import os

import pytest

from core.domain.models import ApodRecord
from samples import IMAGE_ENTRY, SECOND_IMAGE_ENTRY, VIDEO_ENTRY


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep real AFETCH_* variables and a local .env out of every test."""

    for key in list(os.environ):
        if key.startswith("AFETCH_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def image_record():
    return ApodRecord.model_validate(IMAGE_ENTRY)


@pytest.fixture
def second_image_record():
    return ApodRecord.model_validate(SECOND_IMAGE_ENTRY)


@pytest.fixture
def video_record():
    return ApodRecord.model_validate(VIDEO_ENTRY)
