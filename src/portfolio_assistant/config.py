import json
import os
from pathlib import Path
from typing import Any, Dict

import yaml

DEFAULT_CONFIG_PATH = os.environ.get("ASSISTANT_CONFIG", "config/assistant.json")

DEFAULT_FALLBACK_TEXT = (
    "I don't have that exact information in my sources. "
    "Would you like me to show related projects or common topics?"
)


def load_config(path: str, missing_ok: bool = False) -> Dict[str, Any]:
    """Read a JSON or YAML config file; with missing_ok, an absent file means the defaults."""
    config_path = Path(path)
    if not config_path.exists():
        if missing_ok:
            return {}
        raise FileNotFoundError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()
    with config_path.open("r", encoding="utf-8") as f:
        if suffix == ".json":
            data = json.load(f)
        elif suffix in {".yml", ".yaml"}:
            data = yaml.safe_load(f)
        else:
            raise ValueError(f"Unsupported config format: {config_path.suffix}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config root must be a mapping: {config_path}")
    return data
