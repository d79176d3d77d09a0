"""Plugin system for framesaver."""

from .hookspecs import hookimpl
from .manager import (
    create_build_steps,
    create_option_registry,
    load_plugins,
    pm,
    register_plugin_build_steps,
    register_plugin_options,
)

__all__ = [
    "hookimpl",
    "create_build_steps",
    "create_option_registry",
    "load_plugins",
    "pm",
    "register_plugin_build_steps",
    "register_plugin_options",
]
