"""Filename sanitizing plus the offline and fallback namers."""

from datetime import datetime
from pathlib import Path
import re

from .constants import (
    DATE_FORMAT,
    GENERIC_STEM_TOKENS,
    MAX_FILENAME_LENGTH_EN,
    MAX_FILENAME_LENGTH_ZH,
    MIN_REUSABLE_STEM_LENGTH,
    OFFLINE_SUFFIX_EN,
    OFFLINE_SUFFIX_ZH,
    SIZE_BUCKETS_MB,
    SIZE_LABELS_EN,
    SIZE_LABELS_ZH,
    TIMESTAMP_FORMAT,
)
from .core import Language

_DISALLOWED_EN = re.compile(r"[^a-z0-9\s_-]")
# CJK Unified Ideographs plus ASCII letters and digits
_DISALLOWED_ZH = re.compile(r"[^\u4e00-\u9fffa-zA-Z0-9\s_-]")
_WHITESPACE = re.compile(r"\s+")
_UNDERSCORES = re.compile(r"_+")
_GENERIC_STEM = re.compile(
    r"^(?:%s)(?=[_\-\s0-9(])" % "|".join(GENERIC_STEM_TOKENS), re.IGNORECASE
)


def max_length_for(language: Language) -> int:
    """CJK characters carry more per character, so the cap is narrower."""
    return MAX_FILENAME_LENGTH_EN if language is Language.EN else MAX_FILENAME_LENGTH_ZH


def sanitize_filename(text: str, language: Language) -> str:
    """Turn free model text into a filesystem-safe name token.

    English text is lowercased and restricted to ``[a-z0-9 _-]``; Chinese text
    keeps its case and may also contain CJK ideographs. Whitespace runs become
    single underscores and the result never starts or ends with one. May
    return an empty string.
    """
    if language is Language.EN:
        text = _DISALLOWED_EN.sub("", text.lower())
    else:
        text = _DISALLOWED_ZH.sub("", text)

    text = _WHITESPACE.sub("_", text)
    text = _UNDERSCORES.sub("_", text)
    text = text.strip("_")

    # Truncation can expose a trailing underscore
    return text[: max_length_for(language)].strip("_")


def date_prefix(now: datetime) -> str:
    return now.strftime(DATE_FORMAT)


def fallback_name(now: datetime) -> str:
    """Deterministic name from the current instant: ``{date}_image_{timestamp}``."""
    return f"{date_prefix(now)}_image_{now.strftime(TIMESTAMP_FORMAT)}"


def size_bucket(size_bytes: int, language: Language) -> str:
    """Coarse size label: under 0.5, 2 and 5 MiB, or larger."""
    labels = SIZE_LABELS_EN if language is Language.EN else SIZE_LABELS_ZH
    size_mb = size_bytes / (1024 * 1024)
    for limit, label in zip(SIZE_BUCKETS_MB, labels):
        if size_mb < limit:
            return label
    return labels[-1]


def is_generic_stem(stem: str) -> bool:
    """Camera and screenshot style names such as ``IMG_0001``."""
    return bool(_GENERIC_STEM.match(stem))


def offline_name(image_path: Path, language: Language, now: datetime) -> str:
    """Name an image from its metadata only. Never touches the network."""
    image_path = Path(image_path)
    date = date_prefix(now)

    stem = sanitize_filename(image_path.stem, language)
    if len(stem) > MIN_REUSABLE_STEM_LENGTH and not is_generic_stem(stem):
        return f"{date}_{stem}"

    try:
        size = image_path.stat().st_size
    except OSError:
        size = 0

    suffix = OFFLINE_SUFFIX_EN if language is Language.EN else OFFLINE_SUFFIX_ZH
    return f"{date}_{size_bucket(size, language)}_{suffix}"
