"""Plugin contract: base class, descriptors, metadata and option checks."""

from __future__ import annotations

from .errors import (
    InvalidDescriptor,
    InvalidOptions,
    PluginError,
    UnsatisfiedDependency,
    ValidationIssue,
)
from .options import prep_options
from .plugin import Plugin, PluginDescriptor, describe

__all__ = [
    "InvalidDescriptor",
    "InvalidOptions",
    "Plugin",
    "PluginDescriptor",
    "PluginError",
    "UnsatisfiedDependency",
    "ValidationIssue",
    "describe",
    "prep_options",
]
