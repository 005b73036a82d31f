"""
Utilities Module
Configuration and logging utilities
"""

from .config import load_config, validate_config, default_config, Config
from .logger import setup_logger

__all__ = ['load_config', 'validate_config', 'default_config', 'Config', 'setup_logger']
