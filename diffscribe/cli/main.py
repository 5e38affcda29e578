"""Main CLI command for generating commit messages."""

from typing import Optional

import typer

from diffscribe import __version__
from diffscribe.commitlint import load_commitlint_rules
from diffscribe.config import LLMProvider, OutputStyle
from diffscribe.generation import AttemptInfo, CommitMessageGenerator, GenerationState
from diffscribe.git import (
    DIFF_SOURCE_UNSTAGED,
    GitError,
    NoChangesError,
    collect_changes,
    commit_with_message,
    get_repo_root,
)
from diffscribe.global_config import GlobalConfigError
from diffscribe.llm import CancellationToken, ConfigurationError, get_provider
from diffscribe.log import configure_from_settings, get_logger, log_prompt
from diffscribe.prompts import PromptContext, build_prompt
from diffscribe.settings import load_generation_settings, load_provider_settings
from diffscribe.cli.utils import (
    TerminalField,
    cancel_on_interrupt,
    parse_provider,
    prompt_failure_action,
)

logger = get_logger("diffscribe")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"diffscribe {__version__}")
        raise typer.Exit()


def main_command(
    ctx: typer.Context,
    style: Optional[str] = typer.Option(
        None,
        "--style",
        help="Output style (header_only, header_and_body)",
    ),
    language: Optional[str] = typer.Option(
        None,
        "--language",
        help="Language code for the message (e.g. en, de, zh-CN)",
    ),
    max_diff_length: Optional[int] = typer.Option(
        None,
        "--max-diff-length",
        min=1,
        help="Maximum diff characters sent to the model",
    ),
    provider: Optional[str] = typer.Option(
        None,
        "--provider",
        help="Override the configured provider",
    ),
    model: Optional[str] = typer.Option(
        None,
        "--model",
        "-m",
        help="Override the configured model",
    ),
    commit: bool = typer.Option(
        False,
        "--commit",
        "-c",
        help="Commit with the generated message",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug logging",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    """Generate a commit message from staged (or unstaged) changes."""
    # If a subcommand is invoked, don't run the default behavior
    if ctx.invoked_subcommand is not None:
        return

    override_style = None
    if style:
        try:
            override_style = OutputStyle(style.lower())
        except ValueError:
            typer.echo(f"Invalid style: {style}", err=True)
            typer.echo("Valid styles: header_only, header_and_body")
            raise typer.Exit(1)

    override_provider = parse_provider(provider) if provider else None

    try:
        settings = load_generation_settings(
            provider=override_provider,
            language=language,
            output_style=override_style,
            max_diff_length=max_diff_length,
            debug=debug or None,
        )
    except GlobalConfigError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(1)

    configure_from_settings(settings.debug)

    try:
        repo_root = get_repo_root()
        changes = collect_changes(repo_root)
    except NoChangesError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1)
    except GitError as e:
        typer.echo(f"Git error: {e}", err=True)
        raise typer.Exit(1)

    rules = load_commitlint_rules(repo_root)
    context = PromptContext(diff=changes.diff, files=changes.files, branch=changes.branch)
    prompt = build_prompt(context, settings, rules)
    log_prompt(logger, prompt, settings.debug, settings.debug_log_prompt)

    # Re-read on every attempt so a retry sees reconfigured settings
    active: dict[str, LLMProvider] = {"provider": settings.provider}

    def provider_factory():
        current = override_provider or load_generation_settings().provider
        active["provider"] = current
        return get_provider(current, load_provider_settings(current, model))

    def on_failure(error, report):
        return prompt_failure_action(error, report, active["provider"])

    field = TerminalField()
    generator = CommitMessageGenerator(provider_factory, field, on_failure, logger)
    token = CancellationToken()
    attempt_info = AttemptInfo(
        repo_path=str(repo_root),
        branch=changes.branch,
        file_count=len(changes.files),
        diff_source=changes.source,
    )

    try:
        with cancel_on_interrupt(token):
            result = generator.run(prompt, settings.output_style, token, attempt_info)
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(1)
    except GlobalConfigError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(1)
    finally:
        field.finish()

    if result.state == GenerationState.CANCELLED:
        typer.echo("Cancelled.", err=True)
        raise typer.Exit(130)
    if result.state != GenerationState.COMPLETED:
        raise typer.Exit(1)

    typer.echo(result.message)

    if commit:
        try:
            output = commit_with_message(
                result.message,
                repo_root,
                include_unstaged=changes.source == DIFF_SOURCE_UNSTAGED,
            )
        except GitError as e:
            typer.echo("Commit failed!", err=True)
            typer.echo(str(e), err=True)
            raise typer.Exit(1)
        typer.echo("Commit successful!", err=True)
        if output:
            typer.echo(output, err=True)
