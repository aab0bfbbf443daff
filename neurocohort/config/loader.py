"""
Configuration loader for neurocohort.

Loads and validates YAML configuration files.
"""

import yaml
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from neurocohort.config.schema import NeuroCohortConfig

logger = logging.getLogger(__name__)

CONFIG_NAMES = ["neurocohort.yaml", "neurocohort.yml"]


def load_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a YAML file.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If the top level is not a mapping
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected mapping at top-level of {path}, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path]) -> NeuroCohortConfig:
    """
    Load and validate neurocohort configuration.

    Args:
        path: Path to neurocohort.yaml

    Returns:
        Validated NeuroCohortConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        pydantic.ValidationError: If config is invalid
    """
    config = NeuroCohortConfig(**load_yaml(path))

    logger.info(f"Loaded neurocohort config from {path}")
    logger.info(f"CDED export: {config.cded.path}")
    logger.info(f"CPD export: {config.cpd.path}")

    return config


def validate_config(config: NeuroCohortConfig) -> bool:
    """
    Validate configuration including path checks.

    Raises:
        FileNotFoundError: If any input path is missing
    """
    errors = config.validate_paths()

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise FileNotFoundError(error_msg)

    return True


def create_default_config(output_path: Union[str, Path]) -> Path:
    """
    Write a default configuration file.

    Returns:
        Path to created file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    default_config = NeuroCohortConfig().model_dump()

    with open(output_path, "w") as f:
        yaml.dump(default_config, f, default_flow_style=False, sort_keys=False)

    logger.info(f"Created default config at {output_path}")
    return output_path


def get_config_path(search_paths: Optional[list] = None) -> Optional[Path]:
    """
    Find a neurocohort configuration file.

    Searches in order:
    1. Provided search_paths
    2. Current directory
    3. Parent directories (up to 3 levels)

    Returns:
        Path to config file if found, None otherwise
    """
    paths_to_search = []

    if search_paths:
        paths_to_search.extend([Path(p) for p in search_paths])

    paths_to_search.append(Path.cwd())

    current = Path.cwd()
    for _ in range(3):
        parent = current.parent
        if parent != current:
            paths_to_search.append(parent)
            current = parent

    for search_dir in paths_to_search:
        for config_name in CONFIG_NAMES:
            config_path = search_dir / config_name
            if config_path.exists():
                return config_path

    return None
