"""Core services for installer settings, logging, and release metadata."""

from .config import InstallerConfig, Verbosity, config_path, load_config, save_config
from .logging_setup import configure_logging, get_logger
from .releases import ReleaseInfo, ReleaseService

__all__ = [
    "InstallerConfig",
    "ReleaseInfo",
    "ReleaseService",
    "Verbosity",
    "config_path",
    "configure_logging",
    "get_logger",
    "load_config",
    "save_config",
]
