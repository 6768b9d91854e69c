import os
from pathlib import Path
from typing import Optional

import yaml

from adolens_core.errors import ConfigurationError

DEFAULT_CONFIG: dict = {
    "organization": None,
    "project": None,
    "model": "gpt-4",
    "temperature": 0.3,
    "max_tokens": 4000,
    "max_chars_per_file": 20000,
    "request_timeout": 30,
    "api_version": "7.0",
    "fetch_workers": 4,
    "exclude": [],  # fnmatch patterns or directory names left out of the default file selection
}

# Values shipped in example env files; treated exactly like a missing value.
PLACEHOLDERS = {
    "organization": "your-organization",
    "project": "your-project",
    "azure_devops_pat": "your-pat",
    "openai_api_key": "your-openai-api-key",
}

_ENV_VARS = {
    "organization": "AZURE_DEVOPS_ORG",
    "project": "AZURE_DEVOPS_PROJECT",
    "azure_devops_pat": "AZURE_DEVOPS_PAT",
    "openai_api_key": "OPENAI_API_KEY",
}


def load_config(config_path: str = ".adolens.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .adolens.yml in the current directory
      3. CLI argument overrides
      4. Environment variables for organization, project and credentials
    """
    config = {**DEFAULT_CONFIG, "exclude": list(DEFAULT_CONFIG["exclude"])}

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Secrets never live in the YAML file; identity may, but the env wins.
    config["azure_devops_pat"] = None
    config["openai_api_key"] = None
    for key, env_var in _ENV_VARS.items():
        value = os.environ.get(env_var)
        if value:
            config[key] = value

    return config


def is_configured(config: dict, key: str) -> bool:
    value = config.get(key)
    return bool(value) and value != PLACEHOLDERS.get(key)


def require_setting(config: dict, key: str) -> str:
    """Return a required setting or raise ConfigurationError.

    Missing, empty and placeholder values are all rejected up front so that a
    bad setup fails before the first network call instead of as a 401 later.
    """
    if not is_configured(config, key):
        env_var = _ENV_VARS.get(key)
        hint = f" Please set the {env_var} environment variable." if env_var else ""
        raise ConfigurationError(f"{key} is not configured.{hint}")
    return str(config[key])
