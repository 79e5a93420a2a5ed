"""Configure-style generator for Go projects: a config source file and a makefile."""
from __future__ import annotations

from .configuration import Configuration
from .generate import ConfigureResult, configure
from .options import DEFAULT_OPTIONS, ConfigureError, ConfigureSettings, OptionDescriptor

__all__ = [
    "Configuration",
    "ConfigureError",
    "ConfigureResult",
    "ConfigureSettings",
    "DEFAULT_OPTIONS",
    "OptionDescriptor",
    "configure",
]
