"""Core configuration and factory components."""

from docgen.core.config import Settings, get_settings
from docgen.core.factory import ComponentFactory, get_factory

__all__ = [
    "Settings",
    "get_settings",
    "ComponentFactory",
    "get_factory",
]
