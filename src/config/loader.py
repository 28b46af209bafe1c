"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY ──────────────────────────────────────────
#
#   1. config/config.yaml  -- static defaults checked into the repo
#                             (site title, markdown extensions)
#   2. .env file           -- local overrides (not committed)
#   3. Environment vars    -- set at deploy time
#
# load_config() reads the YAML file first, then deep-merges the
# Settings-derived values on top:
#   base      = {"site": {"title": "wiki"}}
#   overrides = {"source": {"local_dir": "/srv/wiki"}}
#   result    = {"site": {"title": "wiki"}, "source": {"local_dir": "/srv/wiki"}}
# ──────────────────────────────────────────────────────────────────────
"""

from pathlib import Path

import yaml

from src.config.settings import Settings
from src.utils.errors import ConfigurationError

DEFAULT_MARKDOWN_EXTENSIONS = ["fenced_code", "tables"]


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.  A missing file yields
            the built-in defaults.
        settings: Settings instance to merge; a fresh one is read from the
            environment when omitted.

    Returns:
        Fully resolved configuration dictionary.

    Raises:
        ConfigurationError: The file exists but is not a YAML mapping.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            try:
                yaml_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(f"Invalid YAML in {config_path}: {exc}") from exc
        if not isinstance(yaml_config, dict):
            raise ConfigurationError(f"{config_path} must contain a mapping at the top level")
    else:
        yaml_config = {}

    yaml_config.setdefault("site", {}).setdefault("title", "wiki")
    yaml_config.setdefault("markdown", {}).setdefault(
        "extensions", list(DEFAULT_MARKDOWN_EXTENSIONS)
    )

    settings = settings or Settings()
    env_overrides = {
        # Read by src.providers.source.factory.build_entry_source().
        "source": {
            "local_dir": settings.wiki_local_dir,
            "tarball_url": settings.tarball_url(),
            "fetch_timeout": settings.wiki_fetch_timeout,
            "name": f"tarball:{settings.wiki_owner}/{settings.wiki_repo}@{settings.wiki_ref}",
        },
        "logging": {
            "level": settings.log_level,
            "json": settings.app_env == "production",
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
