"""CLI commands for global configuration management."""

from typing import Optional

import typer

from diffscribe import global_config
from diffscribe.config import (
    API_KEY_ENV_VARS,
    AVAILABLE_MODELS,
    DEFAULT_LANGUAGE,
    DEFAULT_MAX_DIFF_LENGTH,
    DEFAULT_MAX_TOKENS,
    DEFAULT_OUTPUT_STYLE,
    DEFAULT_TEMPERATURE,
    LLMProvider,
    OutputStyle,
)
from diffscribe.llm import VARIANTS, get_provider
from diffscribe.llm.exceptions import ConfigurationError
from diffscribe.prompts import LANGUAGE_NAMES
from diffscribe.settings import load_provider_settings, resolve_api_key
from diffscribe.cli.utils import mask_key, parse_provider

# Subcommand group for configuration management
config_app = typer.Typer(
    name="config",
    help="Manage global diffscribe configuration in ~/.diffscribe/",
    add_completion=False,
)


@config_app.command("show")
def config_show() -> None:
    """Show current global configuration."""
    try:
        if not global_config.is_configured():
            typer.echo("No configuration found. Run 'diffscribe config set-provider <name>' to set up.")
            return

        config = global_config.load_global_config()
        provider = global_config.get_active_provider()

        typer.echo("Current diffscribe configuration (~/.diffscribe/config.yaml):")
        typer.echo()
        typer.echo(f"  Provider: {provider.value if provider else 'not set'}")
        if provider:
            section = global_config.get_provider_section(provider)
            variant = VARIANTS[provider]
            typer.echo(f"  Model: {section.get('model') or variant.default_model or 'not set'}")
            typer.echo(f"  Base URL: {section.get('base_url') or variant.default_base_url or 'not set'}")
        typer.echo(f"  Max Tokens: {config.get('max_tokens', DEFAULT_MAX_TOKENS)}")
        typer.echo(f"  Temperature: {config.get('temperature', DEFAULT_TEMPERATURE)}")
        typer.echo(f"  Language: {config.get('language', DEFAULT_LANGUAGE)}")
        typer.echo(f"  Output Style: {config.get('output_style', DEFAULT_OUTPUT_STYLE.value)}")
        typer.echo(f"  Max Diff Length: {config.get('max_diff_length', DEFAULT_MAX_DIFF_LENGTH)}")
        if config.get("custom_prompt"):
            typer.echo("  Custom Prompt: set")
        typer.echo()

        # Check for API key
        if provider:
            env_var = API_KEY_ENV_VARS[provider]
            api_key = resolve_api_key(provider)
            if api_key:
                typer.echo(f"  API Key ({env_var}): {mask_key(api_key)}")
            else:
                typer.echo(f"  API Key ({env_var}): not set")

    except global_config.GlobalConfigError as e:
        typer.echo(f"Error reading configuration: {e}", err=True)
        raise typer.Exit(1)


@config_app.command("set-key")
def config_set_key(
    provider: str = typer.Argument(
        ...,
        help="Provider name (openai, anthropic, google, openrouter, groq, mistral, custom)"
    )
) -> None:
    """Set or update an API key for a provider."""
    llm_provider = parse_provider(provider)
    env_var = API_KEY_ENV_VARS[llm_provider]

    typer.echo(f"Setting API key for {llm_provider.value}")
    api_key = typer.prompt(f"Enter your {llm_provider.value} API key", hide_input=True)

    try:
        global_config.save_credential(env_var, api_key)
    except global_config.GlobalConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"✓ API key saved for {llm_provider.value}")


@config_app.command("set-provider")
def config_set_provider(
    provider: str = typer.Argument(
        ...,
        help="Provider name (openai, anthropic, google, openrouter, groq, mistral, custom)"
    ),
    model: Optional[str] = typer.Option(
        None,
        "--model",
        "-m",
        help="Model name (optional, will prompt if not provided)"
    ),
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        help="Endpoint base URL (required for the custom provider)"
    ),
) -> None:
    """Set the active LLM provider, model and endpoint."""
    llm_provider = parse_provider(provider)
    models = AVAILABLE_MODELS[llm_provider]

    if not model:
        if models:
            typer.echo(f"Available models for {llm_provider.value}:")
            for i, m in enumerate(models, 1):
                typer.echo(f"  {i}. {m}")

            model_choice = typer.prompt(f"Select a model (1-{len(models)})", type=int, default=1)
            if model_choice < 1 or model_choice > len(models):
                typer.echo("Invalid choice. Aborting.", err=True)
                raise typer.Exit(1)
            model = models[model_choice - 1]
        else:
            model = typer.prompt("Model name")
    elif models and model not in models:
        typer.echo(f"Warning: {model} is not in the list of known models for {llm_provider.value}")
        proceed = typer.confirm("Continue anyway?", default=False)
        if not proceed:
            raise typer.Exit(0)

    if llm_provider == LLMProvider.CUSTOM and not base_url:
        base_url = typer.prompt("Base URL (e.g. http://localhost:11434/v1)")

    try:
        global_config.set_provider_settings(llm_provider, model=model, base_url=base_url)
    except global_config.GlobalConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"✓ Provider set to: {llm_provider.value}")
    typer.echo(f"✓ Model set to: {model}")
    if base_url:
        typer.echo(f"✓ Base URL set to: {base_url}")


@config_app.command("set-style")
def config_set_style(
    style: str = typer.Argument(..., help="Output style (header_only, header_and_body)")
) -> None:
    """Set the default output style."""
    try:
        output_style = OutputStyle(style.lower())
    except ValueError:
        typer.echo(f"Invalid style: {style}", err=True)
        typer.echo("Valid styles: header_only, header_and_body")
        raise typer.Exit(1)

    try:
        global_config.set_output_style(output_style)
    except global_config.GlobalConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"✓ Output style set to: {output_style.value}")


@config_app.command("set-language")
def config_set_language(
    language: str = typer.Argument(..., help="Language code (en, zh-CN, zh-TW, ja, ko, de, fr, es)")
) -> None:
    """Set the language of generated messages."""
    if language not in LANGUAGE_NAMES:
        typer.echo(f"Invalid language: {language}", err=True)
        typer.echo(f"Valid languages: {', '.join(LANGUAGE_NAMES)}")
        raise typer.Exit(1)

    try:
        global_config.set_language(language)
    except global_config.GlobalConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"✓ Language set to: {LANGUAGE_NAMES[language]}")


@config_app.command("list-providers")
def config_list_providers() -> None:
    """List all available LLM providers."""
    typer.echo("Available LLM providers:")
    typer.echo()
    for provider in LLMProvider:
        variant = VARIANTS[provider]
        default_model = variant.default_model or "user supplied"
        typer.echo(f"  • {provider.value} ({variant.display_name}, default model: {default_model})")
    typer.echo()
    typer.echo("Use 'diffscribe config set-provider <provider>' to switch.")


@config_app.command("test")
def config_test(
    provider: Optional[str] = typer.Argument(
        None,
        help="Provider to test (defaults to the active provider)"
    )
) -> None:
    """Send a tiny prompt to check that the provider answers."""
    try:
        llm_provider = (
            parse_provider(provider) if provider
            else global_config.get_active_provider() or LLMProvider.OPENAI
        )
        client = get_provider(llm_provider, load_provider_settings(llm_provider))
        client.validate()
    except (ConfigurationError, global_config.GlobalConfigError) as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Testing {client.display_name} ({client.model})...")
    if client.test_connection():
        typer.echo("✓ Connection OK")
    else:
        typer.echo("✗ Connection failed", err=True)
        raise typer.Exit(1)
