"""Image discovery and filesystem metadata (no pixel decoding)."""

from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from .constants import DEFAULT_MIME_TYPE, MIME_TYPES, SUPPORTED_EXTENSIONS
from .core import BatchError, EncodedImage, FileMetadata


def guess_mime_type(file_path: Path) -> str:
    """Detect MIME type using the file extension."""
    return MIME_TYPES.get(Path(file_path).suffix.lower(), DEFAULT_MIME_TYPE)


def is_supported_image(
    file_path: Path, extensions: Iterable[str] = SUPPORTED_EXTENSIONS
) -> bool:
    """Check the extension against the allow-list, ignoring case."""
    return Path(file_path).suffix.lower() in tuple(extensions)


def read_metadata(file_path: Path) -> FileMetadata:
    """Stat an image file.

    Width and height are always 0: dimensions are not decoded.
    """
    file_path = Path(file_path)
    stat = file_path.stat()
    return FileMetadata(
        size_bytes=stat.st_size,
        modified_time=datetime.fromtimestamp(stat.st_mtime),
        extension=file_path.suffix,
        mime_type=guess_mime_type(file_path),
    )


def encode_image(file_path: Path) -> EncodedImage:
    """Read image bytes for transfer to a provider."""
    file_path = Path(file_path)
    return EncodedImage(data=file_path.read_bytes(), mime_type=guess_mime_type(file_path))


def collect_images(
    target: Path | str | Iterable[Path | str],
    extensions: Iterable[str] = SUPPORTED_EXTENSIONS,
) -> list[Path]:
    """Resolve a directory or an explicit list of files into image paths.

    Directories are scanned non-recursively and sorted by name. Explicit
    lists keep their order. Files outside the allow-list are dropped.
    """
    extensions = tuple(extensions)

    if isinstance(target, (str, Path)):
        path = Path(target)
        if path.is_dir():
            try:
                entries = sorted(path.iterdir(), key=lambda p: p.name)
            except OSError as e:
                raise BatchError(f"Failed to scan directory {path}: {e}") from e
            return [p for p in entries if p.is_file() and is_supported_image(p, extensions)]
        if not path.exists():
            raise BatchError(f"Path does not exist: {path}")
        candidates: list[Path] = [path]
    else:
        candidates = [Path(p) for p in target]

    return [p for p in candidates if is_supported_image(p, extensions)]
