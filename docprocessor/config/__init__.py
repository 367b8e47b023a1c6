"""Configuration module: exports Settings and load_config."""

from docprocessor.config.loader import load_config
from docprocessor.config.settings import Settings

__all__ = ["Settings", "load_config"]
