"""Shared core utilities for placeholder expansion and configuration loading."""

from .config_loader import FILE_LOADERS, load_config_file, load_config_files, merge_mappings, register_loader
from .template import (
    Expander,
    Literal,
    Reference,
    Variable,
    build_registry,
    expand,
    expand_all,
    order,
    parse,
)

__all__ = [
    "Expander",
    "FILE_LOADERS",
    "Literal",
    "Reference",
    "Variable",
    "build_registry",
    "expand",
    "expand_all",
    "load_config_file",
    "load_config_files",
    "merge_mappings",
    "order",
    "parse",
    "register_loader",
]
