"""Commit message generation under one cancellable, retryable operation.

CommitMessageGenerator drives a provider through the states

    IDLE -> REQUESTING -> STREAMING -> COMPLETED | CANCELLED | FAILED

streaming tokens into a visible field through a DebouncedFlusher. In
header-only mode the request is cut short as soon as the first complete
header line has arrived. Failures are classified and handed to a callback
that decides whether to retry, reconfigure or give up.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from diffscribe.config import FLUSH_INTERVAL_SECONDS, OutputStyle
from diffscribe.flush import DebouncedFlusher, MessageField
from diffscribe.llm.base import GenerationOptions, LLMClient
from diffscribe.llm.cancellation import CancellationToken
from diffscribe.llm.errors import ErrorReport, describe_error, safe_host
from diffscribe.llm.exceptions import AbortedError, EmptyResponseError, LLMError
from diffscribe.log import get_logger
from diffscribe.message import normalize_commit_message

HEADER_COMPLETE_REASON = "header complete"

_BARE_LABEL_RE = re.compile(r"^\s*(commit message|message)\s*:\s*$", re.IGNORECASE)


class GenerationState(str, Enum):
    """Lifecycle of one generation run."""

    IDLE = "idle"
    REQUESTING = "requesting"
    STREAMING = "streaming"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class FailureAction(str, Enum):
    """What the caller wants done after a failed attempt."""

    RETRY = "retry"
    RECONFIGURE = "reconfigure"
    CANCEL = "cancel"


@dataclass(frozen=True)
class AttemptInfo:
    """Context recorded in the per-attempt log line."""

    repo_path: str = ""
    branch: str = "unknown"
    file_count: int = 0
    diff_source: str = "staged"


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of CommitMessageGenerator.run."""

    state: GenerationState
    message: Optional[str] = None
    attempts: int = 0
    error: Optional[ErrorReport] = None

    @property
    def completed(self) -> bool:
        return self.state == GenerationState.COMPLETED


ProviderFactory = Callable[[], LLMClient]
FailureHandler = Callable[[LLMError, ErrorReport], FailureAction]


def is_header_line(line: str) -> bool:
    """Return True if a complete line can serve as the commit header.

    Blank lines, fence markers and bare "commit message:" labels are
    preamble, not headers.
    """
    stripped = line.strip()
    if not stripped or stripped.startswith("```"):
        return False
    return not _BARE_LABEL_RE.match(stripped)


class _HeaderWatcher:
    """Token callback that stops the request once a header line is complete."""

    def __init__(self, flusher: DebouncedFlusher, token: CancellationToken):
        self._flusher = flusher
        self._token = token
        self._buffer = ""
        self.stopped = False

    @property
    def text(self) -> str:
        return self._buffer

    def __call__(self, delta: str) -> None:
        if self.stopped or not delta:
            return

        start = len(self._buffer)
        self._buffer += delta

        # Only newlines in the new delta can complete a line
        line_start = self._buffer.rfind("\n", 0, start) + 1
        newline = self._buffer.find("\n", start)
        while newline != -1:
            if is_header_line(self._buffer[line_start:newline]):
                self._buffer = self._buffer[:newline]
                self.stopped = True
                self._flusher.replace(self._buffer)
                self._token.cancel(HEADER_COMPLETE_REASON)
                return
            line_start = newline + 1
            newline = self._buffer.find("\n", line_start)

        self._flusher.replace(self._buffer)


class CommitMessageGenerator:
    """Runs a prompt against a provider and writes the message into a field."""

    def __init__(
        self,
        provider_factory: ProviderFactory,
        field: MessageField,
        on_failure: FailureHandler,
        logger: Optional[logging.Logger] = None,
        flush_interval: float = FLUSH_INTERVAL_SECONDS,
    ):
        """Initialize the generator.

        Args:
            provider_factory: Builds a provider from the current settings.
                Called once at start and again for every retry.
            field: The visible field receiving streamed and final text.
            on_failure: Decides what to do after a failed attempt.
            logger: Logger for the per-attempt line and error details.
            flush_interval: Debounce interval for field updates in seconds.
        """
        self.provider_factory = provider_factory
        self.field = field
        self.on_failure = on_failure
        self.logger = logger or get_logger(__name__)
        self.flush_interval = flush_interval
        self.state = GenerationState.IDLE

    def run(
        self,
        prompt: str,
        output_style: OutputStyle,
        cancel_token: Optional[CancellationToken] = None,
        attempt_info: Optional[AttemptInfo] = None,
    ) -> GenerationResult:
        """Generate a commit message.

        Args:
            prompt: The rendered prompt.
            output_style: HEADER_ONLY enables the early stop.
            cancel_token: The caller's token; cancelling it ends the run.
            attempt_info: Context for the per-attempt log line.

        Returns:
            GenerationResult in COMPLETED, CANCELLED or FAILED state.

        Raises:
            ConfigurationError: If the initial provider is not fully
                configured. No request is sent in that case.
        """
        cancel_token = cancel_token or CancellationToken()
        attempt_info = attempt_info or AttemptInfo()
        header_only = output_style == OutputStyle.HEADER_ONLY
        initial_text = self.field.get_text()

        provider = self.provider_factory()
        provider.validate()

        attempt = 0
        while True:
            if cancel_token.cancelled:
                return self._cancelled(initial_text, attempt)

            attempt += 1
            self._log_attempt(provider, attempt_info, attempt)

            try:
                message = self._attempt(provider, prompt, header_only, cancel_token)
            except LLMError as e:
                if cancel_token.cancelled:
                    return self._cancelled(initial_text, attempt)
                error = e
            else:
                self.field.set_text(message)
                self.state = GenerationState.COMPLETED
                return GenerationResult(self.state, message, attempt)

            self.state = GenerationState.FAILED
            self.field.set_text(initial_text)
            report = describe_error(error, provider.base_url)
            self.logger.warning(report.log_message)

            action = self.on_failure(error, report)
            while action == FailureAction.RECONFIGURE:
                action = self.on_failure(error, report)

            if action == FailureAction.CANCEL:
                return GenerationResult(self.state, None, attempt, report)

            provider = self.provider_factory()

    def _attempt(
        self,
        provider: LLMClient,
        prompt: str,
        header_only: bool,
        cancel_token: CancellationToken,
    ) -> str:
        """Run one request and return the normalized message."""
        token = cancel_token.child()
        flusher = DebouncedFlusher(self.field, self.flush_interval)
        watcher = _HeaderWatcher(flusher, token) if header_only else None

        def on_token(delta: str) -> None:
            self.state = GenerationState.STREAMING
            if watcher is not None:
                watcher(delta)
            else:
                flusher.push(delta)

        self.state = GenerationState.REQUESTING
        try:
            try:
                raw = provider.generate(
                    prompt, GenerationOptions(cancel_token=token, on_token=on_token)
                )
            except AbortedError:
                if watcher is None or not watcher.stopped or cancel_token.cancelled:
                    raise
                raw = watcher.text
            else:
                if watcher is not None and watcher.stopped:
                    raw = watcher.text
        finally:
            flusher.close()

        message = normalize_commit_message(raw, header_only=header_only)
        if not message:
            raise EmptyResponseError("The model returned no usable text")
        return message

    def _cancelled(self, initial_text: str, attempts: int) -> GenerationResult:
        self.field.set_text(initial_text)
        self.state = GenerationState.CANCELLED
        return GenerationResult(self.state, None, attempts)

    def _log_attempt(self, provider: LLMClient, info: AttemptInfo, attempt: int) -> None:
        self.logger.info(
            "generate attempt=%d repo=%s branch=%s files=%d source=%s provider=%s host=%s",
            attempt,
            info.repo_path,
            info.branch,
            info.file_count,
            info.diff_source,
            provider.name,
            safe_host(provider.base_url),
        )
