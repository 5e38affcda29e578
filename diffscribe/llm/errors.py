"""Classification of provider errors into user and log messages.

The user message is a short paraphrase that never leaks request details.
The log message names the endpoint by scheme and host only and carries a
truncated error body.
"""

from dataclasses import dataclass
from urllib.parse import urlsplit

from diffscribe.llm.exceptions import (
    AbortedError,
    ConfigurationError,
    EmptyResponseError,
    HttpError,
    TransportError,
)

MAX_LOGGED_ERROR_CHARS = 800


@dataclass(frozen=True)
class ErrorReport:
    """Paired user-facing and log-facing descriptions of one error."""

    user_message: str
    log_message: str


def safe_host(base_url: str) -> str:
    """Reduce a URL to ``scheme://host[:port]``.

    Credentials, path and query string are dropped. Anything that does not
    parse as an absolute URL is reported as ``<invalid url>``.
    """
    if not base_url:
        return "<unset>"
    try:
        parts = urlsplit(base_url)
        host = parts.hostname
        port = parts.port
    except ValueError:
        return "<invalid url>"
    if not parts.scheme or not host:
        return "<invalid url>"
    netloc = f"{host}:{port}" if port else host
    return f"{parts.scheme}://{netloc}"


def truncate(text: str, max_chars: int = MAX_LOGGED_ERROR_CHARS) -> str:
    """Cut text to max_chars, marking the cut with an ellipsis."""
    return text[:max_chars] + "…" if len(text) > max_chars else text


def describe_error(error: BaseException, base_url: str) -> ErrorReport:
    """Describe an error raised during generation.

    Args:
        error: The exception.
        base_url: Endpoint the request went to.

    Returns:
        ErrorReport with guidance matched to the error category.
    """
    host = safe_host(base_url)
    detail = truncate(str(error))

    if isinstance(error, HttpError):
        status = error.status_code
        base = f"Request failed (HTTP {status})."
        log = f"HTTP {status} host={host} err={detail}"

        if status in (401, 403):
            return ErrorReport(f"{base} Unauthorized. Check API key and permissions.", log)
        if status == 404:
            return ErrorReport(
                f"{base} Not Found. Check the base URL (it usually ends in /v1) "
                "and that the server exposes /chat/completions.",
                log,
            )
        if status == 429:
            return ErrorReport(
                f"{base} Rate limited. Try again later or reduce request frequency.", log
            )
        if 500 <= status <= 599:
            return ErrorReport(f"{base} Server error. Retry later or check provider status.", log)
        return ErrorReport(f"{base} Check your endpoint configuration.", log)

    if isinstance(error, AbortedError):
        return ErrorReport("Request cancelled.", f"aborted host={host}")

    if isinstance(error, ConfigurationError):
        return ErrorReport(
            f"Provider is not fully configured. {detail}",
            f"config host={host} err={detail}",
        )

    if isinstance(error, EmptyResponseError):
        return ErrorReport(
            "The model returned an empty response. Retry or try another model.",
            f"empty host={host}",
        )

    if isinstance(error, TransportError):
        return ErrorReport(
            f"Request failed. Check network connectivity and base URL (host: {host}).",
            f"transport host={host} err={detail}",
        )

    return ErrorReport(
        f"Request failed. Check network connectivity and base URL (host: {host}).",
        f"unknown host={host} err={detail}",
    )
