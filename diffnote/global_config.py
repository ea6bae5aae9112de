"""User-level settings kept under ~/.diffnote/.

Two files live there:
- config.yaml: provider, model, output and input token limits, commit style,
  ignore globs
- credentials: KEY=value lines holding provider API keys, mode 0600
"""

import os
import stat
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import dotenv_values

from diffnote.config import (
    DEFAULT_COMMIT_STYLE,
    DEFAULT_MAX_INPUT_TOKENS,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_PROVIDER,
    DEFAULT_TEMPERATURE,
    CommitStyle,
    LLMProvider,
)

_CONFIG_DIR = Path.home() / ".diffnote"

CONFIG_FILENAME = "config.yaml"
CREDENTIALS_FILENAME = "credentials"

_CREDENTIALS_HEADER = (
    "# diffnote API credentials\n"
    "# One PROVIDER_API_KEY=value per line\n\n"
)

# Globs excluded from the diff in a freshly initialized config
_STARTER_IGNORE = ["*.min.js", "*.min.css"]


class GlobalConfigError(Exception):
    """~/.diffnote could not be read or written, or holds a bad value."""


def get_global_config_dir() -> Path:
    return _CONFIG_DIR


def ensure_global_config_dir() -> Path:
    """Create ~/.diffnote if needed and return it."""
    directory = get_global_config_dir()
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def get_config_file_path() -> Path:
    return get_global_config_dir() / CONFIG_FILENAME


def get_credentials_file_path() -> Path:
    return get_global_config_dir() / CREDENTIALS_FILENAME


def is_configured() -> bool:
    """True once config.yaml exists."""
    return get_config_file_path().exists()


# --- config.yaml -----------------------------------------------------------


def load_global_config() -> Dict[str, Any]:
    """Read config.yaml as a dict.

    A missing file reads as ``{}``; an empty file too.

    Raises:
        GlobalConfigError: The file is unreadable, is not valid YAML, or its
            top level is not a mapping.
    """
    path = get_config_file_path()
    if not path.exists():
        return {}

    try:
        data = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as e:
        raise GlobalConfigError(f"Failed to load config from {path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise GlobalConfigError(f"Config file {path} must contain a mapping")
    return data


def save_global_config(config: Dict[str, Any]) -> None:
    """Overwrite config.yaml, keeping key order as given."""
    ensure_global_config_dir()
    path = get_config_file_path()
    try:
        path.write_text(yaml.safe_dump(config, default_flow_style=False, sort_keys=False))
    except (OSError, yaml.YAMLError) as e:
        raise GlobalConfigError(f"Failed to save config to {path}: {e}")


def _setting(key: str, default: Any = None) -> Any:
    return load_global_config().get(key, default)


def _update_settings(**values: Any) -> None:
    config = load_global_config()
    config.update(values)
    save_global_config(config)


def get_active_provider() -> Optional[LLMProvider]:
    """Configured provider, or None when unset or not a known provider name."""
    name = _setting("provider")
    if not name:
        return None
    try:
        return LLMProvider(name)
    except ValueError:
        return None


def get_active_model() -> Optional[str]:
    return _setting("model")


def set_provider_and_model(provider: LLMProvider, model: str) -> None:
    _update_settings(provider=provider.value, model=model)


def get_max_tokens() -> Optional[int]:
    """Output token cap passed to the provider."""
    return _setting("max_tokens")


def get_temperature() -> Optional[float]:
    return _setting("temperature")


def _require_positive_int(value: Any) -> int:
    # bool is an int subclass; "true" in YAML must not read as 1
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise GlobalConfigError(
            f"max_input_tokens must be a positive integer, got {value!r}"
        )
    return value


def get_max_input_tokens() -> Optional[int]:
    """Token budget for the whole prompt, or None when not configured.

    Raises:
        GlobalConfigError: The stored value is not a positive integer.
    """
    value = _setting("max_input_tokens")
    return None if value is None else _require_positive_int(value)


def set_max_input_tokens(max_input_tokens: int) -> None:
    _update_settings(max_input_tokens=_require_positive_int(max_input_tokens))


def get_commit_style() -> Optional[CommitStyle]:
    """Configured title style, or None when not configured.

    Raises:
        GlobalConfigError: The stored value is not a known style.
    """
    name = _setting("commit_style")
    if not name:
        return None
    try:
        return CommitStyle(name)
    except ValueError:
        valid = ", ".join(s.value for s in CommitStyle)
        raise GlobalConfigError(f"commit_style must be one of {valid}, got {name!r}")


def set_commit_style(style: CommitStyle) -> None:
    _update_settings(commit_style=style.value)


def get_default_ignore_patterns() -> list:
    """Extra exclusion globs from ``default_ignore``; empty when unset."""
    return list(_setting("default_ignore", []) or [])


def set_default_ignore_patterns(patterns: list) -> None:
    _update_settings(default_ignore=list(patterns))


def initialize_default_config() -> bool:
    """Write a starter config.yaml unless one is already there.

    Returns:
        Whether a file was written.
    """
    if is_configured():
        return False

    save_global_config({
        "provider": DEFAULT_PROVIDER.value,
        "model": DEFAULT_MODEL,
        "max_tokens": DEFAULT_MAX_TOKENS,
        "max_input_tokens": DEFAULT_MAX_INPUT_TOKENS,
        "temperature": DEFAULT_TEMPERATURE,
        "commit_style": DEFAULT_COMMIT_STYLE.value,
        "default_ignore": list(_STARTER_IGNORE),
    })
    return True


# --- credentials -------------------------------------------------------------


def load_credentials() -> Dict[str, str]:
    """Map of env var name to API key from the credentials file.

    The file uses dotenv syntax. Comments and lines without a value are
    dropped, and ``${VAR}`` is not expanded.
    """
    path = get_credentials_file_path()
    if not path.exists():
        return {}
    try:
        entries = dotenv_values(path, interpolate=False)
    except OSError as e:
        raise GlobalConfigError(f"Failed to load credentials from {path}: {e}")
    return {key: value for key, value in entries.items() if value}


def save_credential(provider_key: str, api_key: str) -> None:
    """Add or replace one key in the credentials file, then restrict it to the owner.

    Args:
        provider_key: Environment variable name, e.g. "ANTHROPIC_API_KEY".
        api_key: The secret to store.
    """
    ensure_global_config_dir()
    path = get_credentials_file_path()

    credentials = load_credentials()
    credentials[provider_key] = api_key
    body = "".join(f"{key}={value}\n" for key, value in credentials.items())

    try:
        path.write_text(_CREDENTIALS_HEADER + body)
        os.chmod(path, stat.S_IRUSR | stat.S_IWUSR)
    except OSError as e:
        raise GlobalConfigError(f"Failed to save credential: {e}")


def get_credential(provider_key: str) -> Optional[str]:
    return load_credentials().get(provider_key)
