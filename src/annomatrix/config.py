"""
Configuration for annotated matrix operations.

Supports YAML and JSON config files. Every operator takes an optional
``config`` argument; ``None`` means ``DEFAULT_CONFIG``.

Examples:
    >>> from pathlib import Path
    >>> from annomatrix.config import load_config, config_from_dict
    >>> config = config_from_dict(load_config(Path("annomatrix.yaml")))
    >>> config.aggregate_separator
    '|'

Example YAML:
    aggregate_separator: ";"
    allow_cartesian: false
    melt_suffixes: ["_gene", "_sample"]
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

import numpy as np
import yaml

from annomatrix.utils.fileio import atomic_write_text

__all__ = [
    'AnnoMatrixConfig',
    'DEFAULT_CONFIG',
    'load_config',
    'config_from_dict',
    'save_config',
    'configure_logging',
]


@dataclass(frozen=True)
class AnnoMatrixConfig:
    """
    Tunable defaults shared by the structural operators.

    Attributes:
        integer_tolerance: Distance from an integer under which a float selector
            value counts as a positional index.
        symmetry_rtol: Relative tolerance of the symmetry test used by melt.
        symmetry_atol: Absolute tolerance of the symmetry test used by melt.
        aggregate_separator: Joins distinct annotation values of aggregated rows.
        allow_cartesian: Whether annotation merges may expand one key into
            several rows.
        melt_suffixes: Suffixes for colliding row/column field names in melt.
        gct_na_string: Token written for missing values in GCT files.
        log_level: Level used by ``configure_logging``.
    """
    integer_tolerance: float = float(np.finfo(float).eps ** 0.5)
    symmetry_rtol: float = 1e-05
    symmetry_atol: float = 1e-08
    aggregate_separator: str = "|"
    allow_cartesian: bool = True
    melt_suffixes: Tuple[str, str] = (".row", ".col")
    gct_na_string: str = "NaN"
    log_level: str = "INFO"

    def __post_init__(self):
        if self.integer_tolerance < 0:
            raise ValueError(f"integer_tolerance must be >= 0, got {self.integer_tolerance}")
        if self.symmetry_rtol < 0 or self.symmetry_atol < 0:
            raise ValueError("symmetry tolerances must be >= 0")
        if not self.aggregate_separator:
            raise ValueError("aggregate_separator must be a non-empty string")
        suffixes = tuple(self.melt_suffixes)
        if len(suffixes) != 2 or suffixes[0] == suffixes[1]:
            raise ValueError(
                f"melt_suffixes must be two distinct strings, got {self.melt_suffixes!r}"
            )
        # YAML/JSON deliver lists
        object.__setattr__(self, 'melt_suffixes', suffixes)


DEFAULT_CONFIG = AnnoMatrixConfig()


def load_config(config_path: Path) -> Dict[str, Any]:
    """
    Load configuration from YAML or JSON file.

    Parameters:
        config_path: Path to config file (.yaml, .yml, or .json)

    Returns:
        Dictionary with configuration values

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is unsupported or invalid
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()

    try:
        with open(config_path, 'r') as f:
            if suffix in ('.yaml', '.yml'):
                config = yaml.safe_load(f)
            elif suffix == '.json':
                config = json.load(f)
            else:
                raise ValueError(
                    f"Unsupported config format: {suffix}. "
                    f"Use .yaml, .yml, or .json"
                )
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file: {e}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file: {e}") from e

    if config is None:
        return {}

    if not isinstance(config, dict):
        raise ValueError("Config file must contain a dictionary/mapping at top level")

    return config


def config_from_dict(values: Mapping[str, Any]) -> AnnoMatrixConfig:
    """
    Build a validated ``AnnoMatrixConfig`` from a mapping.

    Keys not given keep their defaults.

    Raises:
        ValueError: On unknown keys or invalid values
    """
    known = {f.name for f in fields(AnnoMatrixConfig)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(
            f"Unknown config keys: {unknown}. Valid keys: {sorted(known)}"
        )
    return AnnoMatrixConfig(**dict(values))


def save_config(config: AnnoMatrixConfig, path: Path) -> None:
    """Write ``config`` as YAML or JSON (chosen by suffix), atomically."""
    path = Path(path)
    data = asdict(config)
    data['melt_suffixes'] = list(config.melt_suffixes)

    suffix = path.suffix.lower()
    if suffix in ('.yaml', '.yml'):
        content = yaml.safe_dump(data, sort_keys=False)
    elif suffix == '.json':
        content = json.dumps(data, indent=2)
    else:
        raise ValueError(f"Unsupported config format: {suffix}. Use .yaml, .yml, or .json")

    atomic_write_text(path, content)


def configure_logging(level: str | int | None = None) -> None:
    """Attach a basic stream handler for scripts; the library itself never calls this."""
    if level is None:
        level = DEFAULT_CONFIG.log_level
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
