import copy
import json
import os
import sys

from .cache import DEFAULT_CACHE_DIR

DEFAULT_CONFIG_PATH = os.path.join(os.path.expanduser("~"), ".bucketbrowser", "config.json")

DEFAULT_CONFIG = {
    "general": {
        "bucket": "",
        "prefix": "",
        "provider": "awscli",
        "profile": None,
        "url": None,
        "cache_dir": DEFAULT_CACHE_DIR,
        "verbose": False,
    }
}


def load_config(config_path=None):
    """Load config from file, merge with defaults."""
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    config = copy.deepcopy(DEFAULT_CONFIG)

    if os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                user_config = json.load(f)
            if not isinstance(user_config, dict):
                raise ValueError("top level must be an object")
            # Merge user config over defaults
            for section, values in user_config.items():
                if section in config and isinstance(config[section], dict) and isinstance(values, dict):
                    config[section].update(values)
                else:
                    config[section] = values
        except (json.JSONDecodeError, ValueError, OSError) as e:
            print(f"Warning: Could not load config from {config_path}: {e}", file=sys.stderr)

    return config


def apply_overrides(config, **overrides):
    """Copy non-None values (e.g. from the command line) into the general section."""
    general = config.setdefault("general", {})
    for name, value in overrides.items():
        if value is not None:
            general[name] = value
    return config


def get_bucket(config):
    return (config.get("general", {}).get("bucket") or "").strip()


def get_prefix(config):
    return config.get("general", {}).get("prefix") or ""


def get_cache_dir(config):
    return os.path.expanduser(config.get("general", {}).get("cache_dir") or DEFAULT_CACHE_DIR)


def is_verbose(config):
    return bool(config.get("general", {}).get("verbose", False))
