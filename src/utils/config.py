"""
Configuration Management
Load and validate configuration files
"""

import logging
import yaml
from pathlib import Path
from typing import Dict, Any
from dataclasses import dataclass

from ..image_evolution.search import crossover_split


logger = logging.getLogger(__name__)


@dataclass
class Config:
    """Configuration container."""
    image: Dict[str, Any]
    evolution: Dict[str, Any]
    output: Dict[str, Any]

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "Config":
        return cls(
            image=dict(config['image']),
            evolution=dict(config['evolution']),
            output=dict(config['output'])
        )


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_integer(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def default_config() -> Dict[str, Any]:
    """Default configuration values."""
    return {
        'image': {
            'width_adjust_divider': 2,
            'height_adjust_divider': 2
        },
        'evolution': {
            'strategy': 'population',
            'population_size': 100,
            'cross_rate': 0.98,
            'mutation_rate': 0.4,
            'generations': 1000,
            'color_range': [0, 255],
            'seed': None
        },
        'output': {
            'output_dir': 'painter_output',
            'display_every': 50
        }
    }


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Missing sections and keys are filled from the defaults.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary
    """
    config_file = Path(config_path)

    if not config_file.exists():
        # Create default config if it doesn't exist
        create_default_config(config_path)

    with open(config_file, 'r') as f:
        loaded = yaml.safe_load(f) or {}

    config = default_config()
    for section, values in loaded.items():
        if isinstance(values, dict) and section in config:
            config[section].update(values)
        else:
            config[section] = values

    return config


def create_default_config(config_path: str):
    """
    Create default configuration file.

    Args:
        config_path: Path where to create config file
    """
    config_file = Path(config_path)
    config_file.parent.mkdir(parents=True, exist_ok=True)

    with open(config_file, 'w') as f:
        yaml.dump(default_config(), f, default_flow_style=False, indent=2)

    logger.info(f"Created default configuration at {config_path}")


def validate_config(config: Dict[str, Any]) -> bool:
    """
    Validate configuration parameters.

    Args:
        config: Configuration dictionary

    Returns:
        True if configuration is valid
    """
    required_sections = ['image', 'evolution', 'output']

    for section in required_sections:
        if section not in config:
            logger.error(f"Missing required configuration section: {section}")
            return False

    image = config['image']
    for param in ['width_adjust_divider', 'height_adjust_divider']:
        if param not in image:
            logger.error(f"Missing required image parameter: {param}")
            return False
        if not isinstance(image[param], int) or image[param] < 1:
            logger.error(f"{param} must be a positive integer, got {image[param]}")
            return False

    evolution = config['evolution']
    required_evolution = ['strategy', 'population_size', 'cross_rate', 'mutation_rate', 'generations']
    for param in required_evolution:
        if param not in evolution:
            logger.error(f"Missing required evolution parameter: {param}")
            return False

    for param in ['cross_rate', 'mutation_rate']:
        value = evolution[param]
        if not _is_number(value) or not 0.0 <= value <= 1.0:
            logger.error(f"{param} must be a number in [0, 1], got {value!r}")
            return False

    for param in ['population_size', 'generations']:
        if not _is_integer(evolution[param]):
            logger.error(f"{param} must be an integer, got {evolution[param]!r}")
            return False

    if evolution['population_size'] < 1:
        logger.error(f"population_size must be positive, got {evolution['population_size']}")
        return False

    if evolution['generations'] < 0:
        logger.error(f"generations must not be negative, got {evolution['generations']}")
        return False

    cross_count, _ = crossover_split(evolution['population_size'], evolution['cross_rate'])
    if cross_count + 1 > evolution['population_size']:
        logger.error(
            f"cross_rate {evolution['cross_rate']} needs {cross_count + 1} parents "
            f"but population_size is {evolution['population_size']}"
        )
        return False

    color_range = evolution.get('color_range', [0, 255])
    if (not isinstance(color_range, (list, tuple)) or len(color_range) != 2
            or not all(_is_integer(c) for c in color_range)
            or not 0 <= color_range[0] <= color_range[1] <= 255):
        logger.error(f"color_range must be [low, high] within 0..255, got {color_range!r}")
        return False

    output = config['output']
    if 'output_dir' not in output:
        logger.error("Missing required output parameter: output_dir")
        return False

    return True
