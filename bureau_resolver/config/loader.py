# bureau_resolver/config/loader.py
"""
YAML persistence for ResolverConfig.

A resolver config file only needs the keys it overrides; everything else
(the creditor alias table, signal weights, inquiry window, wallet bands)
falls back to the schema defaults. Validation lives in `schema.py`; this
module only reads, writes and reports.
"""
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from .schema import ResolverConfig

logger = logging.getLogger(__name__)


def _build_config(overrides: Dict[str, Any]) -> ResolverConfig:
    """Validates user overrides on top of the defaults, logging any rejection."""
    try:
        return ResolverConfig.model_validate(overrides)
    except ValidationError as e:
        # A bad weight or threshold would silently change every grouping.
        logger.critical(f"Resolver configuration rejected:\n{e}")
        raise


def load_raw_config(config_path: Path | str) -> Dict[str, Any]:
    """
    Reads a resolver YAML file without validating it.

    An empty file reads as no overrides.

    Raises:
        FileNotFoundError: If `config_path` does not exist.
        TypeError: If the top level of the file is not a mapping.
    """
    config_path = Path(config_path)
    if not config_path.exists():
        logger.error(f"Resolver config not found: {config_path}")
        raise FileNotFoundError(f"Resolver config not found: {config_path}")

    logger.info(f"Reading resolver overrides from {config_path}")
    with open(config_path, 'r', encoding='utf-8') as f:
        overrides = yaml.safe_load(f) or {}

    if not isinstance(overrides, dict):
        logger.error(f"{config_path} holds a {type(overrides).__name__}, not a mapping.")
        raise TypeError(
            f"Resolver config must be a YAML mapping of sections, got {type(overrides).__name__}."
        )
    return overrides


def load_config(config_path: Optional[Path | str] = None) -> ResolverConfig:
    """
    Returns the resolver configuration, with file overrides applied if given.

    Args:
        config_path: YAML file with the sections to override (`normalization`,
                     `scoring`, `grouping`, `inquiries`, `wallet`, `output`).
                     None gives the built-in defaults.

    Raises:
        FileNotFoundError: If `config_path` is given but missing.
        ValidationError: If an override is unknown or out of range.
    """
    if config_path:
        overrides = load_raw_config(config_path)
    else:
        logger.info("No resolver config given; using built-in defaults.")
        overrides = {}

    return _build_config(overrides)


def save_config(config: ResolverConfig, path: Path | str) -> None:
    """
    Writes a full resolver configuration to YAML.

    The alias table and the wallet bands are tuples in memory and are written
    as nested lists, which `load_config` turns back into the same tuples.

    Raises:
        TypeError: If `config` is not a ResolverConfig.
    """
    if not isinstance(config, ResolverConfig):
        raise TypeError(f"Expected a ResolverConfig, got {type(config).__name__}.")

    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    logger.info(f"Writing resolver config to {output_path}")
    with open(output_path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(
            config.model_dump(mode='json'),
            f,
            default_flow_style=False,
            sort_keys=False,
            indent=2,
        )
