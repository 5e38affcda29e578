"""Shared utility functions for CLI commands."""

import signal
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

import typer

from diffscribe import global_config
from diffscribe.config import API_KEY_ENV_VARS, LLMProvider
from diffscribe.generation import FailureAction
from diffscribe.llm.cancellation import CancellationToken
from diffscribe.llm.errors import ErrorReport
from diffscribe.llm.exceptions import LLMError

VALID_PROVIDERS = ", ".join(p.value for p in LLMProvider)


class TerminalField:
    """Message field that previews streamed text on stderr.

    Appends are written as they arrive; any other overwrite starts a fresh
    preview line.
    """

    def __init__(self, initial_text: str = ""):
        self._text = initial_text
        self._shown = ""
        self._lock = threading.Lock()

    def get_text(self) -> str:
        with self._lock:
            return self._text

    def set_text(self, text: str) -> None:
        with self._lock:
            self._text = text
            if text.startswith(self._shown):
                typer.echo(text[len(self._shown):], nl=False, err=True)
            else:
                typer.echo("", err=True)
                typer.echo(text, nl=False, err=True)
            self._shown = text

    def finish(self) -> None:
        """End the preview line."""
        with self._lock:
            if self._shown:
                typer.echo("", err=True)
            self._shown = ""


@contextmanager
def cancel_on_interrupt(token: CancellationToken) -> Iterator[None]:
    """Turn the first Ctrl+C into a cooperative cancel of token.

    A second Ctrl+C raises KeyboardInterrupt as usual.
    """

    def handler(signum, frame):
        if token.cancelled:
            raise KeyboardInterrupt
        token.cancel("interrupted")
        typer.echo("\nCancelling...", err=True)

    previous = signal.signal(signal.SIGINT, handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def parse_provider(value: str) -> LLMProvider:
    """Parse a provider name or exit with the list of valid names."""
    try:
        return LLMProvider(value.lower())
    except ValueError:
        typer.echo(f"Invalid provider: {value}", err=True)
        typer.echo(f"Valid providers: {VALID_PROVIDERS}")
        raise typer.Exit(1)


def mask_key(api_key: str) -> str:
    return api_key[:8] + "..." + api_key[-4:] if len(api_key) > 12 else "***"


def reconfigure_provider(provider: LLMProvider) -> None:
    """Prompt for new connection settings and store them.

    Empty answers keep the current value.
    """
    section = global_config.get_provider_section(provider)
    typer.echo(f"Reconfiguring {provider.value} (press Enter to keep a value)", err=True)

    api_key = typer.prompt("API key", default="", show_default=False, hide_input=True)
    base_url = typer.prompt("Base URL", default=section.get("base_url", ""))
    model = typer.prompt("Model", default=section.get("model", ""))

    if api_key:
        global_config.save_credential(API_KEY_ENV_VARS[provider], api_key)
    global_config.set_provider_settings(
        provider,
        model=model or None,
        base_url=base_url or None,
    )
    typer.echo("✓ Settings saved", err=True)


def prompt_failure_action(
    error: LLMError,
    report: ErrorReport,
    provider: Optional[LLMProvider] = None,
) -> FailureAction:
    """Show a failed attempt and ask the user how to continue."""
    typer.echo("", err=True)
    typer.echo(f"✗ {report.user_message}", err=True)

    choice = typer.prompt("[r]etry, re[c]onfigure or [q]uit", default="q").strip().lower()
    if choice in ("r", "retry"):
        return FailureAction.RETRY
    if choice in ("c", "reconfigure"):
        if provider is not None:
            reconfigure_provider(provider)
        return FailureAction.RECONFIGURE
    return FailureAction.CANCEL
