"""Shared fixtures for the image rename tests."""

from datetime import datetime
from pathlib import Path

import pytest

from image_rename.core import AnalysisResult, EncodedImage, NameSource, VisionProvider

FIXED_NOW = datetime(2026, 10, 19, 14, 30, 5)
TODAY = "2026-10-19"
FALLBACK = "2026-10-19_image_20261019143005"
MIB = 1024 * 1024


class FakeProvider(VisionProvider):
    """Returns a canned reply, or raises it when it is an exception."""

    def __init__(self, reply):
        self.reply = reply
        self.calls: list[tuple[EncodedImage, str]] = []

    def describe(self, image: EncodedImage, prompt: str) -> str:
        self.calls.append((image, prompt))
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply


class FakeAnalyzer:
    """Analyzer stand-in mapping file names to base names."""

    def __init__(self, names: dict[str, str], failing: tuple[str, ...] = ()):
        self.names = names
        self.failing = failing
        self.calls: list[Path] = []

    def suggest_name(self, image_path, language=None, offline_mode=None):
        image_path = Path(image_path)
        self.calls.append(image_path)
        if image_path.name in self.failing:
            raise OSError(f"cannot read {image_path.name}")
        return AnalysisResult(self.names[image_path.name], NameSource.OFFLINE)


@pytest.fixture
def fixed_now():
    return lambda: FIXED_NOW


@pytest.fixture
def make_image(tmp_path):
    """Create an image file of a given size under tmp_path."""

    def _make(name: str, size: int = 16, directory: Path | None = None) -> Path:
        path = (directory or tmp_path) / name
        path.write_bytes(b"\x89PNG" + b"\0" * max(size - 4, 0))
        return path

    return _make


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep IMAGE_RENAME_* variables from the developer's shell out of tests."""
    for name in (
        "IMAGE_RENAME_API_KEY",
        "IMAGE_RENAME_BASE_URL",
        "IMAGE_RENAME_MODEL",
        "IMAGE_RENAME_LANGUAGE",
        "IMAGE_RENAME_OFFLINE",
    ):
        monkeypatch.delenv(name, raising=False)
