"""
Core interfaces, data types and configuration for the image rename tool.
"""

from abc import ABC, abstractmethod
from collections.abc import Collection
import base64
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from enum import Enum
import os
from pathlib import Path
from typing import Any

import yaml

from .constants import (
    DEFAULT_IMAGE_QUALITY,
    DEFAULT_LANGUAGE,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
    ENV_API_KEY,
    ENV_BASE_URL,
    ENV_LANGUAGE,
    ENV_MODEL,
    ENV_OFFLINE,
    GLM_MODEL_PREFIX,
    MAX_FILENAME_LENGTH_EN,
    MAX_FILENAME_LENGTH_ZH,
    SUPPORTED_EXTENSIONS,
)


class Language(Enum):
    """Language of the generated filenames."""

    ZH = "zh"
    EN = "en"


class Provider(Enum):
    """Remote vision API shapes."""

    GEMINI = "gemini"
    GLM = "glm"


class NameSource(Enum):
    """Where a suggested name came from."""

    GEMINI = "online-provider-A"
    GLM = "online-provider-B"
    OFFLINE = "offline-heuristic"
    FALLBACK = "fallback-timestamp"


class ErrorKind(Enum):
    """Failure categories reported by provider clients."""

    QUOTA = "quota"
    MODEL_NOT_FOUND = "model_not_found"
    PERMISSION = "permission"
    NETWORK = "network"
    TIMEOUT = "timeout"
    HTTP = "http"
    MALFORMED_RESPONSE = "malformed_response"
    UNKNOWN = "unknown"


class ImageRenameError(Exception):
    """Base class for all errors raised by this package."""


class ConfigError(ImageRenameError):
    """Invalid configuration value or file."""


class BatchError(ImageRenameError):
    """A whole batch could not be processed (e.g. missing directory)."""


class ProviderError(ImageRenameError):
    """A remote vision API call failed."""

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.UNKNOWN,
        status_code: int | None = None,
        status_text: str | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code
        self.status_text = status_text


@dataclass(frozen=True)
class AnalysisRequest:
    """Input for analyzing a single image."""

    image_path: Path
    language: Language
    offline_mode: bool
    model_name: str


@dataclass(frozen=True)
class AnalysisResult:
    """Suggested base name (no extension) and how it was produced."""

    suggested_base_name: str
    source: NameSource


@dataclass
class FileMetadata:
    """Filesystem metadata of an image. Pixels are never decoded."""

    size_bytes: int
    modified_time: datetime
    extension: str
    mime_type: str
    width: int = 0
    height: int = 0


@dataclass(frozen=True)
class EncodedImage:
    """Image bytes ready to be sent to a provider."""

    data: bytes
    mime_type: str

    @property
    def b64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    @property
    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.b64}"


@dataclass
class RenamePlan:
    """A precomputed rename decision produced by a preview."""

    original_path: Path
    original_name: str
    suggested_name: str | None = None
    is_same_name: bool = False
    would_rename: bool = False
    error: str | None = None
    source: NameSource | None = None
    metadata: FileMetadata | None = None


@dataclass
class RenameOutcome:
    """Result of renaming (or simulating the rename of) one file."""

    original_path: Path
    original_name: str
    new_path: Path | None = None
    new_name: str | None = None
    success: bool = False
    skipped: bool = False
    dry_run: bool = False
    reason: str | None = None
    error: str | None = None


@dataclass
class RenameReport:
    """Outcomes of a rename batch, in input order."""

    outcomes: list[RenameOutcome] = field(default_factory=list)

    @property
    def successful(self) -> list[RenameOutcome]:
        return [o for o in self.outcomes if o.success and not o.skipped]

    @property
    def failed(self) -> list[RenameOutcome]:
        return [o for o in self.outcomes if not o.success]

    @property
    def skipped(self) -> list[RenameOutcome]:
        return [o for o in self.outcomes if o.skipped]


@dataclass(frozen=True)
class ProgressEvent:
    """Advisory progress emitted after each file completes."""

    current: int
    total: int
    percent: int
    file_name: str
    processed: int | None = None
    skipped: int | None = None
    success: int | None = None
    failed: int | None = None


def resolve_provider(model_name: str) -> Provider:
    """Map a model name onto the API shape that serves it."""
    if model_name and model_name.lower().startswith(GLM_MODEL_PREFIX):
        return Provider.GLM
    return Provider.GEMINI


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class RenameConfig:
    """Immutable configuration passed into every operation."""

    api_key: str | None = None
    base_url: str | None = None
    model_name: str = DEFAULT_MODEL
    provider: Provider | None = None
    language: Language = Language(DEFAULT_LANGUAGE)
    offline_mode: bool = False
    image_quality: int = DEFAULT_IMAGE_QUALITY
    supported_extensions: tuple[str, ...] = SUPPORTED_EXTENSIONS
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS
    request_timeout: float | None = None

    def __post_init__(self):
        if not isinstance(self.language, Language):
            try:
                language = Language(str(self.language).lower())
            except ValueError as e:
                raise ConfigError(
                    f"Unsupported language: {self.language!r} (expected zh or en)"
                ) from e
            object.__setattr__(self, "language", language)

        if self.provider is None:
            object.__setattr__(self, "provider", resolve_provider(self.model_name))
        elif not isinstance(self.provider, Provider):
            try:
                provider = Provider(str(self.provider).lower())
            except ValueError as e:
                raise ConfigError(f"Unsupported provider: {self.provider!r}") from e
            object.__setattr__(self, "provider", provider)

        extensions = tuple(
            ext.lower() if ext.startswith(".") else f".{ext.lower()}"
            for ext in self.supported_extensions
        )
        object.__setattr__(self, "supported_extensions", extensions)

    def with_overrides(self, **changes: Any) -> "RenameConfig":
        """Return a copy with the non-None values in ``changes`` applied."""
        changes = {k: v for k, v in changes.items() if v is not None}
        if changes.get("model_name", self.model_name) != self.model_name and "provider" not in changes:
            changes["provider"] = None
        return replace(self, **changes)

    @classmethod
    def from_file(cls, config_path: str | Path) -> "RenameConfig":
        """Load configuration from YAML file."""
        try:
            with open(config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Could not load config from {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{config_path}: expected a mapping at top level")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"{config_path}: unknown keys: {', '.join(unknown)}")

        if "supported_extensions" in data:
            data["supported_extensions"] = tuple(data["supported_extensions"])
        return cls(**data)

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> "RenameConfig":
        """Defaults, then the YAML file if present, then environment variables."""
        config = cls()
        if config_path is not None and Path(config_path).is_file():
            config = cls.from_file(config_path)
        return config.with_overrides(**cls._env_overrides())

    @staticmethod
    def _env_overrides() -> dict[str, Any]:
        overrides: dict[str, Any] = {
            "api_key": os.getenv(ENV_API_KEY),
            "base_url": os.getenv(ENV_BASE_URL),
            "model_name": os.getenv(ENV_MODEL),
            "language": os.getenv(ENV_LANGUAGE),
        }
        offline = os.getenv(ENV_OFFLINE)
        if offline is not None:
            overrides["offline_mode"] = _parse_bool(offline)
        return overrides

    def as_display_dict(self) -> dict[str, str]:
        """Configuration summary safe to print (the API key is masked)."""
        max_length = (
            MAX_FILENAME_LENGTH_EN if self.language is Language.EN else MAX_FILENAME_LENGTH_ZH
        )
        return {
            "Model": self.model_name,
            "Provider": self.provider.value,
            "Base URL": self.base_url or "(default)",
            "API Key": "Set" if self.api_key else "Not set",
            "Language": self.language.value,
            "Offline Mode": str(self.offline_mode),
            "Image Quality": str(self.image_quality),
            "Supported Formats": ", ".join(self.supported_extensions),
            "Max Filename Length": str(max_length),
            "Temperature": str(self.temperature),
            "Max Tokens": str(self.max_tokens),
        }


class VisionProvider(ABC):
    """Base class for remote vision model clients."""

    @abstractmethod
    def describe(self, image: EncodedImage, prompt: str) -> str:
        """Send the image and prompt, return the model's raw text."""
        pass


class SafetyChecker(ABC):
    """Base class for safety checks."""

    @abstractmethod
    def check_rename_safety(
        self,
        source: Path,
        target: Path,
        claimed: Collection[Path] = (),
        vacated: Collection[Path] = (),
    ) -> dict[str, Any]:
        """Check if rename operation is safe."""
        pass
