"""Configuration management for neurocohort."""

from neurocohort.config.loader import (
    create_default_config,
    get_config_path,
    load_config,
    validate_config,
)
from neurocohort.config.schema import (
    DatasetConfig,
    NeuroCohortConfig,
    OutputConfig,
    RoutingConfig,
)

__all__ = [
    "DatasetConfig",
    "NeuroCohortConfig",
    "OutputConfig",
    "RoutingConfig",
    "create_default_config",
    "get_config_path",
    "load_config",
    "validate_config",
]
