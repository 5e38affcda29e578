"""Global configuration management for diffscribe.

Handles user-level configuration stored in ~/.diffscribe/:
- config.yaml: Provider, model, and generation preferences
- credentials: API keys for LLM providers
"""

import os
import stat
from pathlib import Path
from typing import Dict, Optional, Any

import yaml

from diffscribe.config import LLMProvider, OutputStyle


class GlobalConfigError(Exception):
    """Raised when there's an error with global configuration."""
    pass


_CONFIG_DIR = Path.home() / ".diffscribe"


def get_global_config_dir() -> Path:
    """Get the global diffscribe configuration directory.

    Returns:
        Path to ~/.diffscribe/
    """
    return _CONFIG_DIR


def ensure_global_config_dir() -> Path:
    """Ensure the global config directory exists.

    Returns:
        Path to ~/.diffscribe/
    """
    config_dir = get_global_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_file_path() -> Path:
    """Get path to config.yaml file."""
    return get_global_config_dir() / "config.yaml"


def get_credentials_file_path() -> Path:
    """Get path to credentials file."""
    return get_global_config_dir() / "credentials"


def load_global_config() -> Dict[str, Any]:
    """Load global configuration from ~/.diffscribe/config.yaml.

    Returns:
        Dictionary with configuration values. Empty dict if file doesn't exist.

    Raises:
        GlobalConfigError: If the file exists but cannot be read or parsed.
    """
    config_file = get_config_file_path()

    if not config_file.exists():
        return {}

    try:
        with open(config_file, "r") as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise GlobalConfigError(f"Failed to load config from {config_file}: {e}")

    if not isinstance(config, dict):
        raise GlobalConfigError(f"Config file {config_file} must contain a mapping")
    return config


def save_global_config(config: Dict[str, Any]) -> None:
    """Save global configuration to ~/.diffscribe/config.yaml.

    Args:
        config: Configuration dictionary to save.
    """
    ensure_global_config_dir()
    config_file = get_config_file_path()

    try:
        with open(config_file, "w") as f:
            yaml.dump(config, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
    except OSError as e:
        raise GlobalConfigError(f"Failed to save config to {config_file}: {e}")


def _parse_credentials(text: str) -> Dict[str, str]:
    credentials = {}
    for line in text.splitlines():
        line = line.strip()
        # Skip empty lines and comments
        if not line or line.startswith("#"):
            continue
        if "=" in line:
            key, value = line.split("=", 1)
            credentials[key.strip()] = value.strip()
    return credentials


def load_credentials() -> Dict[str, str]:
    """Load API keys from ~/.diffscribe/credentials.

    Returns:
        Dictionary mapping environment variable names to API keys.
    """
    credentials_file = get_credentials_file_path()

    if not credentials_file.exists():
        return {}

    try:
        return _parse_credentials(credentials_file.read_text())
    except OSError as e:
        raise GlobalConfigError(f"Failed to load credentials from {credentials_file}: {e}")


def save_credential(provider_key: str, api_key: str) -> None:
    """Save or update an API key in the credentials file.

    Args:
        provider_key: Environment variable name (e.g., "OPENAI_API_KEY")
        api_key: The API key value.
    """
    ensure_global_config_dir()
    credentials_file = get_credentials_file_path()

    existing_creds = load_credentials()
    existing_creds[provider_key] = api_key

    try:
        with open(credentials_file, "w") as f:
            f.write("# diffscribe API credentials\n")
            f.write("# Format: PROVIDER_API_KEY=your_key_here\n\n")

            for key, value in existing_creds.items():
                f.write(f"{key}={value}\n")

        # Owner read/write only
        os.chmod(credentials_file, stat.S_IRUSR | stat.S_IWUSR)

    except OSError as e:
        raise GlobalConfigError(f"Failed to save credential: {e}")


def get_credential(provider_key: str) -> Optional[str]:
    """Get an API key from credentials file.

    Args:
        provider_key: Environment variable name (e.g., "OPENAI_API_KEY")

    Returns:
        The API key if found, None otherwise.
    """
    return load_credentials().get(provider_key)


def get_active_provider() -> Optional[LLMProvider]:
    """Get the active LLM provider from global config.

    Returns:
        LLMProvider enum value, or None if not configured.
    """
    provider_str = load_global_config().get("provider")

    if not provider_str:
        return None

    try:
        return LLMProvider(provider_str)
    except ValueError:
        return None


def set_active_provider(provider: LLMProvider) -> None:
    """Set the active provider in global config."""
    config = load_global_config()
    config["provider"] = provider.value
    save_global_config(config)


def get_provider_section(provider: LLMProvider) -> Dict[str, Any]:
    """Get the per-provider settings block (model, base_url).

    Args:
        provider: The LLM provider.

    Returns:
        The ``providers.<name>`` mapping, or an empty dict.
    """
    providers = load_global_config().get("providers") or {}
    section = providers.get(provider.value) or {}
    return section if isinstance(section, dict) else {}


def set_provider_settings(
    provider: LLMProvider,
    model: Optional[str] = None,
    base_url: Optional[str] = None,
) -> None:
    """Store model and/or base URL for a provider and make it active.

    Args:
        provider: The LLM provider.
        model: Model name to store (unchanged if None).
        base_url: Endpoint base URL to store (unchanged if None).
    """
    config = load_global_config()
    config["provider"] = provider.value
    providers = config.setdefault("providers", {})
    section = providers.setdefault(provider.value, {})
    if model is not None:
        section["model"] = model
    if base_url is not None:
        section["base_url"] = base_url
    save_global_config(config)


def get_max_tokens() -> Optional[int]:
    """Get max_tokens setting from global config."""
    return load_global_config().get("max_tokens")


def get_temperature() -> Optional[float]:
    """Get temperature setting from global config."""
    return load_global_config().get("temperature")


def get_language() -> Optional[str]:
    """Get the commit message language code from global config."""
    return load_global_config().get("language")


def set_language(language: str) -> None:
    """Set the commit message language code in global config."""
    config = load_global_config()
    config["language"] = language
    save_global_config(config)


def get_output_style() -> Optional[OutputStyle]:
    """Get the output style from global config.

    Returns:
        OutputStyle enum value, or None if missing or invalid.
    """
    style_str = load_global_config().get("output_style")
    if not style_str:
        return None
    try:
        return OutputStyle(style_str)
    except ValueError:
        return None


def set_output_style(style: OutputStyle) -> None:
    """Set the output style in global config."""
    config = load_global_config()
    config["output_style"] = style.value
    save_global_config(config)


def initialize_default_config() -> None:
    """Initialize config.yaml with default values if it doesn't exist."""
    config_file = get_config_file_path()

    if config_file.exists():
        return

    default_config = {
        "provider": "openai",
        "max_tokens": 500,
        "temperature": 0.7,
        "language": "en",
        "output_style": "header_and_body",
        "max_diff_length": 4000,
        "debug": False,
        "debug_log_prompt": False,
        "providers": {
            "openai": {"model": "gpt-4o"},
        },
    }

    save_global_config(default_config)


def is_configured() -> bool:
    """Check if diffscribe has been configured.

    Returns:
        True if config.yaml exists, False otherwise.
    """
    return get_config_file_path().exists()
