"""Vision model clients for the two supported API shapes."""

import logging

from google.api_core import exceptions as google_exceptions
import google.generativeai as genai
from google.generativeai.types import HarmBlockThreshold, HarmCategory
import requests

from .constants import DEFAULT_GLM_ENDPOINT, DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE
from .core import (
    EncodedImage,
    ErrorKind,
    Provider,
    ProviderError,
    RenameConfig,
    VisionProvider,
)

logger = logging.getLogger(__name__)

SAFETY_SETTINGS = [
    {"category": HarmCategory.HARM_CATEGORY_HARASSMENT, "threshold": HarmBlockThreshold.BLOCK_NONE},
    {"category": HarmCategory.HARM_CATEGORY_HATE_SPEECH, "threshold": HarmBlockThreshold.BLOCK_NONE},
    {
        "category": HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
        "threshold": HarmBlockThreshold.BLOCK_NONE,
    },
    {
        "category": HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
        "threshold": HarmBlockThreshold.BLOCK_NONE,
    },
]

# Most specific first: several of these share base classes
_GOOGLE_ERROR_KINDS = (
    (google_exceptions.ResourceExhausted, ErrorKind.QUOTA),
    (google_exceptions.NotFound, ErrorKind.MODEL_NOT_FOUND),
    (google_exceptions.PermissionDenied, ErrorKind.PERMISSION),
    (google_exceptions.Unauthenticated, ErrorKind.PERMISSION),
    (google_exceptions.DeadlineExceeded, ErrorKind.TIMEOUT),
    (google_exceptions.ServiceUnavailable, ErrorKind.NETWORK),
    (google_exceptions.RetryError, ErrorKind.NETWORK),
    (google_exceptions.GoogleAPICallError, ErrorKind.HTTP),
)

_HTTP_STATUS_KINDS = {
    401: ErrorKind.PERMISSION,
    403: ErrorKind.PERMISSION,
    404: ErrorKind.MODEL_NOT_FOUND,
    408: ErrorKind.TIMEOUT,
    429: ErrorKind.QUOTA,
}


def error_kind_for_status(status_code: int) -> ErrorKind:
    return _HTTP_STATUS_KINDS.get(status_code, ErrorKind.HTTP)


def error_kind_for_google_error(error: Exception) -> ErrorKind:
    for error_type, kind in _GOOGLE_ERROR_KINDS:
        if isinstance(error, error_type):
            return kind
    return ErrorKind.UNKNOWN


class GeminiProvider(VisionProvider):
    """Generate-content style client with the image sent inline."""

    def __init__(self, api_key: str, model_name: str, timeout: float | None = None):
        self.api_key = api_key
        self.model_name = model_name
        self.timeout = timeout

    def describe(self, image: EncodedImage, prompt: str) -> str:
        genai.configure(api_key=self.api_key)
        model = genai.GenerativeModel(
            model_name=self.model_name, safety_settings=SAFETY_SETTINGS
        )
        request_options = {"timeout": self.timeout} if self.timeout else None

        try:
            response = model.generate_content(
                [prompt, {"mime_type": image.mime_type, "data": image.data}],
                request_options=request_options,
            )
        except google_exceptions.GoogleAPIError as e:
            raise ProviderError(
                str(e),
                kind=error_kind_for_google_error(e),
                status_code=getattr(e, "code", None),
            ) from e
        except Exception as e:
            raise ProviderError(str(e)) from e

        try:
            text = response.candidates[0].content.parts[0].text
        except (AttributeError, IndexError, TypeError) as e:
            raise ProviderError(
                "Response has no candidate text", kind=ErrorKind.MALFORMED_RESPONSE
            ) from e

        logger.debug("Gemini raw response: %r", text)
        return text.strip()


class GLMProvider(VisionProvider):
    """Chat-completions style client with the image sent as a data URI."""

    def __init__(
        self,
        api_key: str,
        model_name: str,
        endpoint: str = DEFAULT_GLM_ENDPOINT,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        timeout: float | None = None,
    ):
        self.api_key = api_key
        self.model_name = model_name
        self.endpoint = endpoint
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

    def build_payload(self, image: EncodedImage, prompt: str) -> dict:
        return {
            "model": self.model_name,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": image.data_uri}},
                    ],
                }
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    def describe(self, image: EncodedImage, prompt: str) -> str:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = requests.post(
                self.endpoint,
                json=self.build_payload(image, prompt),
                headers=headers,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise ProviderError(str(e), kind=ErrorKind.TIMEOUT) from e
        except requests.RequestException as e:
            raise ProviderError(str(e), kind=ErrorKind.NETWORK) from e

        if not 200 <= response.status_code < 300:
            raise ProviderError(
                f"HTTP {response.status_code} {response.reason}",
                kind=error_kind_for_status(response.status_code),
                status_code=response.status_code,
                status_text=response.reason,
            )

        try:
            result = response.json()
            message = result["choices"][0]["message"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderError(
                "Response has no choices[0].message", kind=ErrorKind.MALFORMED_RESPONSE
            ) from e

        content = message.get("content") if isinstance(message, dict) else None
        logger.debug("GLM raw response: %r", content)
        return (content or "").strip()


def get_provider(config: RenameConfig) -> VisionProvider:
    """
    Build the client for the provider resolved in the configuration.
    """
    if not config.api_key:
        raise ProviderError("No API key configured", kind=ErrorKind.PERMISSION)

    if config.provider is Provider.GLM:
        return GLMProvider(
            api_key=config.api_key,
            model_name=config.model_name,
            endpoint=config.base_url or DEFAULT_GLM_ENDPOINT,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout=config.request_timeout,
        )
    return GeminiProvider(
        api_key=config.api_key,
        model_name=config.model_name,
        timeout=config.request_timeout,
    )
