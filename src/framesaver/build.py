"""Ordered build steps run over a pipeline graph.

A build runs every registered step once, in ascending priority order (ties
keep registration order), against a :class:`BuildContext` owned by that build
alone. Steps mutate ``context.graph`` and report non-fatal problems through
``context.report``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from .errors import FrameSaverError, log_error_reporter
from .graph import PipelineGraph
from .options import OptionRegistry, UserInput

logger = logging.getLogger(__name__)


@dataclass
class BuildContext:
    """State for a single graph build."""

    graph: PipelineGraph
    user_input: UserInput
    registry: OptionRegistry | None = None
    # Errors reported by steps during this build
    errors: list[FrameSaverError] = field(default_factory=list)

    def report(self, error: FrameSaverError) -> None:
        log_error_reporter(error)
        self.errors.append(error)


BuildStep = Callable[[BuildContext], None]


@dataclass(frozen=True)
class RegisteredStep:
    priority: float
    sequence: int
    name: str
    step: BuildStep


class BuildSteps:
    """Priority-ordered collection of build steps."""

    def __init__(self) -> None:
        self._steps: list[RegisteredStep] = []

    def add_step(
        self, step: BuildStep, priority: float, name: str | None = None
    ) -> None:
        """Register a step.

        Args:
            step: Callable taking the build context
            priority: Lower runs first
            name: Name used in logs (defaults to the callable's name)
        """
        name = name or getattr(step, "__name__", repr(step))
        self._steps.append(
            RegisteredStep(
                priority=priority,
                sequence=len(self._steps),
                name=name,
                step=step,
            )
        )
        logger.debug(f"Registered build step {name} at priority {priority}")

    def steps(self) -> list[RegisteredStep]:
        return sorted(self._steps, key=lambda s: (s.priority, s.sequence))

    def run(self, context: BuildContext) -> BuildContext:
        """Run each step once, in order.

        A step that raises is logged with its name and the exception
        propagates; whether that is fatal is up to the caller.
        """
        for registered in self.steps():
            try:
                registered.step(context)
            except Exception:
                logger.exception(f"Build step {registered.name} failed")
                raise
        return context

    def __len__(self) -> int:
        return len(self._steps)


def generate(
    graph: PipelineGraph,
    raw_input: dict[str, Any] | None = None,
    steps: BuildSteps | None = None,
    registry: OptionRegistry | None = None,
) -> BuildContext:
    """Run the build steps over ``graph`` for one request.

    When ``steps`` or ``registry`` are omitted they are collected from the
    loaded plugins.
    """
    from .plugins.manager import create_build_steps, create_option_registry

    if registry is None:
        registry = create_option_registry()
    if steps is None:
        steps = create_build_steps()

    context = BuildContext(
        graph=graph,
        user_input=UserInput(raw_input, registry=registry),
        registry=registry,
    )
    return steps.run(context)
