"""Builtin plugin that saves the first, last and/or a range of video frames."""

import logging

from .build import BuildContext
from .config import get_step_priority
from .errors import ConfigurationInitError
from .extractor import (
    FRAME_SAVER_OPTIONS,
    ExtractionOptions,
    insert_frame_extraction,
)
from .plugins.hookspecs import hookimpl

logger = logging.getLogger(__name__)


@hookimpl
def register_options(register):
    """Register the frame saver options.

    Registration stops at the first conflict; options left unregistered
    resolve to their defaults, which disables the matching extraction.
    """
    try:
        for option in FRAME_SAVER_OPTIONS:
            register(option)
    except ConfigurationInitError as e:
        logger.error(f"FrameSaver extension init error: {e}")


def save_frames_step(context: BuildContext) -> None:
    """Build step: append frame extraction nodes for this build's options."""
    options = ExtractionOptions.from_user_input(context.user_input)
    insert_frame_extraction(context.graph, options, report=context.report)


@hookimpl
def register_build_steps(register):
    """Register the frame saver build step."""
    register(save_frames_step, get_step_priority(), name="framesaver.save_frames")
