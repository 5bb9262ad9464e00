"""Image analyzer: turns one image into a suggested base name."""

from collections.abc import Callable
from datetime import datetime
import logging
from pathlib import Path

from .core import (
    AnalysisRequest,
    AnalysisResult,
    ErrorKind,
    Language,
    NameSource,
    Provider,
    ProviderError,
    RenameConfig,
    VisionProvider,
    resolve_provider,
)
from .metadata import encode_image
from .naming import date_prefix, fallback_name, offline_name, sanitize_filename
from .prompts import build_prompt
from .providers import get_provider

logger = logging.getLogger(__name__)

ERROR_HINTS = {
    ErrorKind.QUOTA: "API quota exceeded. Please check your usage limits.",
    ErrorKind.MODEL_NOT_FOUND: "Model not found or not available. Please check your model name.",
    ErrorKind.PERMISSION: "Permission denied. Check your API key and its permissions.",
    ErrorKind.NETWORK: "Network error. Please check your internet connection.",
    ErrorKind.TIMEOUT: "The request timed out.",
    ErrorKind.HTTP: "The API returned an error status.",
    ErrorKind.MALFORMED_RESPONSE: "The API response did not contain a filename.",
    ErrorKind.UNKNOWN: "API error.",
}

_SOURCES = {Provider.GEMINI: NameSource.GEMINI, Provider.GLM: NameSource.GLM}


class ImageAnalyzer:
    """Suggest descriptive base names for images.

    ``analyze`` never raises: every failure is logged and resolved to the
    timestamp fallback name.
    """

    def __init__(
        self,
        config: RenameConfig,
        provider: VisionProvider | None = None,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.config = config
        self.now = now
        self._provider = provider

    def request_for(
        self,
        image_path: Path,
        language: Language | None = None,
        offline_mode: bool | None = None,
    ) -> AnalysisRequest:
        return AnalysisRequest(
            image_path=Path(image_path),
            language=language or self.config.language,
            offline_mode=self.config.offline_mode if offline_mode is None else offline_mode,
            model_name=self.config.model_name,
        )

    def suggest_name(
        self,
        image_path: Path,
        language: Language | None = None,
        offline_mode: bool | None = None,
    ) -> AnalysisResult:
        return self.analyze(self.request_for(image_path, language, offline_mode))

    def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        if request.offline_mode:
            name = offline_name(request.image_path, request.language, self.now())
            return AnalysisResult(name, NameSource.OFFLINE)

        try:
            provider_id, provider = self._provider_for(request)
            image = encode_image(request.image_path)
            prompt = build_prompt(provider_id, request.language)

            raw = provider.describe(image, prompt)
            clean = sanitize_filename(raw, request.language)
            logger.debug("%s: raw %r -> cleaned %r", request.image_path.name, raw, clean)

            if clean:
                return AnalysisResult(f"{date_prefix(self.now())}_{clean}", _SOURCES[provider_id])
            logger.warning(
                "%s: model response was empty after cleaning, using fallback name",
                request.image_path.name,
            )
        except ProviderError as e:
            logger.warning(
                "%s: analysis failed [%s] %s %s",
                request.image_path.name,
                e.kind.value,
                ERROR_HINTS[e.kind],
                e,
            )
        except Exception as e:
            logger.warning("%s: image processing failed: %s", request.image_path.name, e)

        return AnalysisResult(fallback_name(self.now()), NameSource.FALLBACK)

    def _provider_for(self, request: AnalysisRequest) -> tuple[Provider, VisionProvider]:
        if request.model_name != self.config.model_name:
            config = self.config.with_overrides(model_name=request.model_name)
            return config.provider, get_provider(config)

        if self._provider is None:
            self._provider = get_provider(self.config)
        return self.config.provider, self._provider
