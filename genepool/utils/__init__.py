"""Utility exports for GenePool."""

from .config_loader import ConfigLoader, LoadedConfig
from .logger import ExperimentLogger, configure_console

__all__ = ["ConfigLoader", "LoadedConfig", "ExperimentLogger", "configure_console"]
