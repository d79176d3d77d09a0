"""Plugin manager for discovering and loading framesaver plugins."""

import logging

import pluggy

from ..build import BuildSteps
from ..errors import ConfigurationInitError
from ..options import OptionRegistry
from .hookspecs import FrameSaverHookSpec

logger = logging.getLogger(__name__)

# Create the plugin manager singleton
pm = pluggy.PluginManager("framesaver")
pm.add_hookspecs(FrameSaverHookSpec)

BUILTIN_PLUGIN_NAME = "framesaver.frame_saver"


def register_builtin_plugins():
    """Register the plugins shipped with framesaver (idempotent)."""
    # Import here to avoid circular imports
    from .. import frame_saver

    if pm.get_plugin(BUILTIN_PLUGIN_NAME) is None:
        pm.register(frame_saver, name=BUILTIN_PLUGIN_NAME)


def load_plugins():
    """Register builtin plugins and discover others via entry points."""
    register_builtin_plugins()
    pm.load_setuptools_entrypoints("framesaver")
    logger.info(f"Loaded {len(pm.get_plugins())} plugin(s)")


def register_plugin_options(registry: OptionRegistry):
    """Call register_options hook for all plugins.

    Args:
        registry: OptionRegistry to register options with
    """

    def register_callback(option):
        return registry.register(option)

    pm.hook.register_options(register=register_callback)


def register_plugin_build_steps(steps: BuildSteps):
    """Call register_build_steps hook for all plugins.

    Args:
        steps: BuildSteps to add the plugin steps to
    """

    def register_callback(step, priority, name=None):
        steps.add_step(step, priority, name=name)

    pm.hook.register_build_steps(register=register_callback)


def create_option_registry() -> OptionRegistry:
    """Return a fresh registry holding every plugin's options."""
    register_builtin_plugins()
    registry = OptionRegistry()
    try:
        register_plugin_options(registry)
    except ConfigurationInitError as e:
        logger.error(f"Option registration failed: {e}")
    return registry


def create_build_steps() -> BuildSteps:
    """Return the build steps of every registered plugin."""
    register_builtin_plugins()
    steps = BuildSteps()
    register_plugin_build_steps(steps)
    return steps
