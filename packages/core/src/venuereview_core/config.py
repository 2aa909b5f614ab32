import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "store": "json",  # "json" | "sqlite" | "gist"
    "store_path": None,  # None = backend default (db.json / venuereview.db)
    "gist_id": None,
    "upload_dir": "uploads",
    "upload_url_prefix": "/uploads",
    "log_level": "WARNING",
}


def load_config(config_path: str = ".venuereview.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .venuereview.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ValueError(f"{config_path} must contain a mapping, got {type(file_config).__name__}")
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Resolve credentials from environment variables
    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    return config
