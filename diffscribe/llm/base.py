"""Provider variants and the client that drives them.

Every provider is a ProviderVariant: a frozen description of its default
endpoint and model plus the functions that map a prompt to an HTTP request
and a response document to text. A single LLMClient executes any variant,
so adding a provider never means subclassing.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional

import httpx

from diffscribe.config import API_KEY_ENV_VARS, LLMProvider, REQUEST_TIMEOUT_SECONDS
from diffscribe.llm.cancellation import CancellationToken
from diffscribe.llm.exceptions import (
    ConfigurationError,
    HttpError,
    LLMError,
    MissingAPIKeyError,
    TransportError,
)
from diffscribe.llm.stream import decode_sse_stream
from diffscribe.settings import ProviderSettings

CONNECTION_TEST_PROMPT = 'Say "OK" if you can read this.'


@dataclass(frozen=True)
class RequestSpec:
    """A fully built HTTP request."""

    url: str
    headers: dict[str, str]
    body: dict[str, Any]


@dataclass(frozen=True)
class ProviderVariant:
    """Static description of one provider.

    Attributes:
        provider: The LLMProvider this variant implements.
        display_name: Human-readable provider name.
        default_base_url: Endpoint used when settings leave it empty.
        default_model: Model used when settings leave it empty.
        requires_api_key: False for local servers that accept anonymous calls.
        build_request: (settings, prompt) -> RequestSpec.
        extract_text: Maps a non-streaming JSON response to text.
    """

    provider: LLMProvider
    display_name: str
    default_base_url: Optional[str]
    default_model: Optional[str]
    requires_api_key: bool
    build_request: Callable[[ProviderSettings, str], RequestSpec]
    extract_text: Callable[[Any], Optional[str]]


def _ignore_token(text: str) -> None:
    pass


@dataclass
class GenerationOptions:
    """Per-call options for LLMClient.generate."""

    cancel_token: CancellationToken = field(default_factory=CancellationToken)
    on_token: Callable[[str], None] = _ignore_token


class LLMClient:
    """Executes generation requests for one provider variant."""

    def __init__(
        self,
        variant: ProviderVariant,
        settings: ProviderSettings,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ):
        """Initialize the client.

        Args:
            variant: The provider variant to drive.
            settings: Connection settings; empty base URL and model fall
                back to the variant defaults.
            transport: Optional httpx transport (used by tests).
            timeout: Request timeout in seconds.
        """
        self.variant = variant
        base_url = settings.base_url or variant.default_base_url or ""
        self.settings = replace(
            settings,
            base_url=base_url.rstrip("/"),
            model=settings.model or variant.default_model or "",
        )
        self._transport = transport
        self._timeout = timeout

    @property
    def name(self) -> str:
        return self.variant.provider.value

    @property
    def display_name(self) -> str:
        return self.variant.display_name

    @property
    def base_url(self) -> str:
        return self.settings.base_url or ""

    @property
    def model(self) -> str:
        return self.settings.model or ""

    def validate(self) -> None:
        """Check that the settings are complete enough to send a request.

        Raises:
            MissingAPIKeyError: If the variant needs a key and none is set.
            ConfigurationError: If model or base URL are missing.
        """
        if self.variant.requires_api_key and not self.settings.api_key:
            env_var = API_KEY_ENV_VARS[self.variant.provider]
            raise MissingAPIKeyError(
                f"{self.display_name} API key not found. Set it using:\n"
                f"  1. Environment variable: export {env_var}=your_key_here\n"
                f"  2. Run: diffscribe config set-key {self.name}"
            )
        if not self.model:
            raise ConfigurationError(
                f"Model is not configured. Run: diffscribe config set-provider {self.name} --model <model>"
            )
        if not self.base_url:
            raise ConfigurationError(
                f"Base URL is not configured. Run: diffscribe config set-provider {self.name} --base-url <url>"
            )

    def generate(self, prompt: str, options: Optional[GenerationOptions] = None) -> str:
        """Send a prompt and return the generated text.

        Streaming responses are fed through the SSE decoder as they arrive;
        single-document responses are delivered to ``on_token`` in one call.

        Args:
            prompt: The prompt to send.
            options: Cancellation token and token callback.

        Returns:
            The generated text.

        Raises:
            ConfigurationError: If the settings are incomplete.
            HttpError: On a non-success HTTP status.
            TransportError: On network failures or an unreadable body.
            AbortedError: If the cancellation token is set.
        """
        options = options or GenerationOptions()
        self.validate()
        request = self.variant.build_request(self.settings, prompt)
        cancel_token = options.cancel_token
        cancel_token.raise_if_cancelled()

        try:
            with httpx.Client(transport=self._transport, timeout=self._timeout) as client:
                with client.stream(
                    "POST", request.url, headers=request.headers, json=request.body
                ) as response:
                    # Closing the response unblocks a read in progress
                    unregister = cancel_token.on_cancel(response.close)
                    try:
                        if response.is_error:
                            response.read()
                            cancel_token.raise_if_cancelled()
                            raise HttpError(
                                self.name, f"API error: {response.text}", response.status_code
                            )

                        content_type = response.headers.get("content-type", "")
                        if content_type.startswith("text/event-stream"):
                            return decode_sse_stream(
                                response.iter_bytes(), options.on_token, cancel_token
                            )

                        response.read()
                        cancel_token.raise_if_cancelled()
                        try:
                            payload = response.json()
                        except ValueError as e:
                            raise TransportError(self.name, f"Unreadable response body: {e}") from e
                    finally:
                        unregister()
        except (httpx.HTTPError, httpx.StreamError) as e:
            cancel_token.raise_if_cancelled()
            raise TransportError(self.name, str(e) or type(e).__name__) from e

        text = (self.variant.extract_text(payload) or "").strip()
        if text:
            options.on_token(text)
        return text

    def test_connection(self) -> bool:
        """Return True if a tiny prompt round-trips successfully."""
        try:
            return bool(self.generate(CONNECTION_TEST_PROMPT))
        except LLMError:
            return False
