"""Tests for the vision provider clients."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from google.api_core import exceptions as google_exceptions
import pytest
import requests

from image_rename.constants import DEFAULT_GLM_ENDPOINT
from image_rename.core import EncodedImage, ErrorKind, ProviderError, RenameConfig
from image_rename.providers import (
    GeminiProvider,
    GLMProvider,
    error_kind_for_status,
    get_provider,
)

IMAGE = EncodedImage(data=b"\x89PNG\r\n\x1a\n", mime_type="image/png")


def _http_response(status_code=200, reason="OK", payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.reason = reason
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


def _gemini_response(*texts):
    parts = [SimpleNamespace(text=t) for t in texts]
    candidates = [SimpleNamespace(content=SimpleNamespace(parts=parts))] if parts else []
    return SimpleNamespace(candidates=candidates)


class TestGLMProvider:
    """Chat-completions client."""

    @pytest.fixture
    def provider(self):
        return GLMProvider(api_key="secret", model_name="glm-4v-flash", endpoint="https://api.test/v4")

    def test_request_shape(self, provider):
        payload = {"choices": [{"message": {"content": "  cat_on_windowsill \n"}}]}
        with patch("image_rename.providers.requests.post", return_value=_http_response(payload=payload)) as post:
            text = provider.describe(IMAGE, "describe this")

        assert text == "cat_on_windowsill"
        assert post.call_args.args[0] == "https://api.test/v4"
        assert post.call_args.kwargs["headers"]["Authorization"] == "Bearer secret"
        assert post.call_args.kwargs["timeout"] is None
        body = post.call_args.kwargs["json"]
        assert body["model"] == "glm-4v-flash"
        assert body["temperature"] == 0.3
        assert body["max_tokens"] == 100
        [message] = body["messages"]
        assert message["role"] == "user"
        assert message["content"] == [
            {"type": "text", "text": "describe this"},
            {"type": "image_url", "image_url": {"url": "data:image/png;base64,iVBORw0KGgo="}},
        ]

    @pytest.mark.parametrize(
        ("status", "reason", "kind"),
        [
            (401, "Unauthorized", ErrorKind.PERMISSION),
            (404, "Not Found", ErrorKind.MODEL_NOT_FOUND),
            (429, "Too Many Requests", ErrorKind.QUOTA),
            (500, "Internal Server Error", ErrorKind.HTTP),
        ],
    )
    def test_non_2xx_status(self, provider, status, reason, kind):
        with patch("image_rename.providers.requests.post", return_value=_http_response(status, reason, {})):
            with pytest.raises(ProviderError) as excinfo:
                provider.describe(IMAGE, "p")

        assert excinfo.value.kind is kind
        assert excinfo.value.status_code == status
        assert excinfo.value.status_text == reason

    @pytest.mark.parametrize(
        "payload",
        [{}, {"choices": []}, {"choices": [{}]}, ValueError("not json")],
    )
    def test_malformed_response(self, provider, payload):
        with patch("image_rename.providers.requests.post", return_value=_http_response(payload=payload)):
            with pytest.raises(ProviderError) as excinfo:
                provider.describe(IMAGE, "p")

        assert excinfo.value.kind is ErrorKind.MALFORMED_RESPONSE

    @pytest.mark.parametrize(
        ("error", "kind"),
        [
            (requests.ConnectionError("refused"), ErrorKind.NETWORK),
            (requests.Timeout("slow"), ErrorKind.TIMEOUT),
        ],
    )
    def test_transport_errors(self, provider, error, kind):
        with patch("image_rename.providers.requests.post", side_effect=error):
            with pytest.raises(ProviderError) as excinfo:
                provider.describe(IMAGE, "p")

        assert excinfo.value.kind is kind


class TestGeminiProvider:
    """Generate-content client."""

    @pytest.fixture
    def genai(self):
        with patch("image_rename.providers.genai") as genai:
            yield genai

    def test_inline_image_and_first_part(self, genai):
        model = genai.GenerativeModel.return_value
        model.generate_content.return_value = _gemini_response(" sunny_beach \n", "ignored")

        text = GeminiProvider("secret", "gemini-2.0-flash").describe(IMAGE, "describe this")

        assert text == "sunny_beach"
        genai.configure.assert_called_once_with(api_key="secret")
        assert genai.GenerativeModel.call_args.kwargs["model_name"] == "gemini-2.0-flash"
        contents = model.generate_content.call_args.args[0]
        assert contents == ["describe this", {"mime_type": "image/png", "data": IMAGE.data}]

    def test_timeout_is_forwarded(self, genai):
        model = genai.GenerativeModel.return_value
        model.generate_content.return_value = _gemini_response("x")

        GeminiProvider("secret", "gemini-2.0-flash", timeout=12).describe(IMAGE, "p")

        assert model.generate_content.call_args.kwargs["request_options"] == {"timeout": 12}

    def test_missing_candidates(self, genai):
        genai.GenerativeModel.return_value.generate_content.return_value = _gemini_response()

        with pytest.raises(ProviderError) as excinfo:
            GeminiProvider("secret", "gemini-2.0-flash").describe(IMAGE, "p")

        assert excinfo.value.kind is ErrorKind.MALFORMED_RESPONSE

    @pytest.mark.parametrize(
        ("error", "kind"),
        [
            (google_exceptions.ResourceExhausted("quota"), ErrorKind.QUOTA),
            (google_exceptions.NotFound("no such model"), ErrorKind.MODEL_NOT_FOUND),
            (google_exceptions.PermissionDenied("denied"), ErrorKind.PERMISSION),
            (google_exceptions.DeadlineExceeded("slow"), ErrorKind.TIMEOUT),
            (google_exceptions.InternalServerError("boom"), ErrorKind.HTTP),
            (RuntimeError("other"), ErrorKind.UNKNOWN),
        ],
    )
    def test_errors_are_classified(self, genai, error, kind):
        genai.GenerativeModel.return_value.generate_content.side_effect = error

        with pytest.raises(ProviderError) as excinfo:
            GeminiProvider("secret", "gemini-2.0-flash").describe(IMAGE, "p")

        assert excinfo.value.kind is kind


def test_error_kind_for_status():
    assert error_kind_for_status(403) is ErrorKind.PERMISSION
    assert error_kind_for_status(408) is ErrorKind.TIMEOUT
    assert error_kind_for_status(502) is ErrorKind.HTTP


def test_get_provider_glm_defaults():
    provider = get_provider(RenameConfig(api_key="k", model_name="glm-4v-flash"))

    assert isinstance(provider, GLMProvider)
    assert provider.endpoint == DEFAULT_GLM_ENDPOINT


def test_get_provider_glm_custom_endpoint():
    config = RenameConfig(api_key="k", model_name="GLM-4V-Plus", base_url="https://proxy.test/chat")

    provider = get_provider(config)

    assert isinstance(provider, GLMProvider)
    assert provider.endpoint == "https://proxy.test/chat"


def test_get_provider_gemini():
    provider = get_provider(RenameConfig(api_key="k", model_name="gemini-1.5-flash"))

    assert isinstance(provider, GeminiProvider)
    assert provider.model_name == "gemini-1.5-flash"


def test_get_provider_requires_api_key():
    with pytest.raises(ProviderError) as excinfo:
        get_provider(RenameConfig(model_name="gemini-1.5-flash"))

    assert excinfo.value.kind is ErrorKind.PERMISSION
