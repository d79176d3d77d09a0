"""Hook specifications for the framesaver plugin system."""

import pluggy

hookspec = pluggy.HookspecMarker("framesaver")
hookimpl = pluggy.HookimplMarker("framesaver")


class FrameSaverHookSpec:
    """Hook specifications for framesaver plugins."""

    @hookspec
    def register_options(self, register):
        """Register user-facing options.

        Args:
            register: Callback to register an option.
                     Usage: register(OptionSpec(...))
                     Raises ConfigurationInitError on a duplicate option id.

        Example:
            @framesaver.hookimpl
            def register_options(register):
                register(OptionSpec(name="My Flag", type="bool", default=False))
        """

    @hookspec
    def register_build_steps(self, register):
        """Register steps that run over the graph on every build.

        Args:
            register: Callback to register a build step.
                     Usage: register(step, priority, name=None)
                     where step(context) mutates context.graph.

        Example:
            @framesaver.hookimpl
            def register_build_steps(register):
                register(add_upscale_nodes, 10)
        """
