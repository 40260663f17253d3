from pathlib import Path
from typing import Dict, Union

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "default.yaml"


def load_config(config_path: Union[str, Path] = DEFAULT_CONFIG_PATH) -> Dict:
    """Loads the YAML configuration file."""
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found at {config_path}")
    with open(config_path, "r") as f:
        config = yaml.safe_load(f)
    return config or {}


def merge_options(config: Dict, section: str, **overrides) -> Dict:
    """Return a config section with any non-None keyword overrides applied."""
    options = dict(config.get(section) or {})
    options.update({k: v for k, v in overrides.items() if v is not None})
    return options
