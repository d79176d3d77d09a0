"""Frame extraction step for video generation pipeline graphs."""


def __getattr__(name):
    """Lazy import for plugin hooks to avoid importing pluggy on plain graph use."""
    if name == "hookimpl":
        from framesaver.plugins import hookimpl

        return hookimpl
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["hookimpl"]
