"""User-facing options registered by extensions.

An :class:`OptionSpec` describes one typed option (name, default, UI group and
ordering). Specs are collected into an :class:`OptionRegistry` when the
extensions initialise, and each build gets its own :class:`UserInput` holding
the raw request values for that build.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Literal

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, computed_field

from .errors import ConfigurationInitError

logger = logging.getLogger(__name__)

GROUP_OTHER_FIXES = "Other Fixes"

_TYPE_ADAPTERS: dict[str, TypeAdapter] = {
    "bool": TypeAdapter(bool),
    "int": TypeAdapter(int),
}


def clean_option_id(name: str) -> str:
    """Return the lookup id for an option name ("Save First Frame" -> "savefirstframe")."""
    return re.sub(r"[^a-z0-9]", "", name.lower())


class OptionSpec(BaseModel, frozen=True):
    """Definition of a registered option."""

    name: str = Field(..., description="Display name")
    type: Literal["bool", "int"] = Field(..., description="Value type")
    default: bool | int = Field(..., description="Value used when unset")
    description: str = ""
    order_priority: float = Field(default=0, description="Sort order in the UI")
    group: str | None = None
    ignore_if: bool | int | None = Field(
        default=None,
        description="Raw values equal to this are treated as unset",
    )
    min: int | None = None
    max: int | None = None

    @computed_field
    @property
    def id(self) -> str:
        return clean_option_id(self.name)

    def coerce(self, value: Any) -> bool | int:
        """Coerce a raw value to this option's type.

        Raises:
            ValueError: value cannot be converted or is outside ``min``/``max``
        """
        try:
            result = _TYPE_ADAPTERS[self.type].validate_python(value)
        except ValidationError as e:
            raise ValueError(
                f"Invalid value {value!r} for option '{self.name}': expected {self.type}"
            ) from e
        if self.type == "int":
            if self.min is not None and result < self.min:
                raise ValueError(f"Option '{self.name}' must be >= {self.min}")
            if self.max is not None and result > self.max:
                raise ValueError(f"Option '{self.name}' must be <= {self.max}")
        return result


class OptionRegistry:
    """Registry of option specs, keyed by option id."""

    def __init__(self) -> None:
        self._options: dict[str, OptionSpec] = {}

    def register(self, option: OptionSpec) -> OptionSpec:
        """Register an option.

        Args:
            option: Option definition

        Returns:
            The registered option

        Raises:
            ConfigurationInitError: An option with the same id already exists
        """
        if option.id in self._options:
            raise ConfigurationInitError(
                f"Option '{option.name}' conflicts with already registered id '{option.id}'"
            )
        self._options[option.id] = option
        logger.debug(f"Registered option: {option.id}")
        return option

    def get(self, option_id: str) -> OptionSpec | None:
        return self._options.get(clean_option_id(option_id))

    def is_registered(self, option: OptionSpec) -> bool:
        """Return True if this exact spec owns its id in the registry."""
        return self._options.get(option.id) is option

    def list_options(self) -> list[OptionSpec]:
        """Return registered options sorted by order priority."""
        return sorted(self._options.values(), key=lambda o: o.order_priority)

    def __contains__(self, option_id: str) -> bool:
        return clean_option_id(option_id) in self._options

    def __len__(self) -> int:
        return len(self._options)


class UserInput:
    """Raw option values for a single build, with typed lookup.

    Keys may be option names or ids; both are normalised to ids.
    """

    def __init__(
        self,
        values: dict[str, Any] | None = None,
        registry: OptionRegistry | None = None,
    ):
        self.values = {clean_option_id(k): v for k, v in (values or {}).items()}
        self.registry = registry

    def get(self, option: OptionSpec, default: Any = None) -> Any:
        """Return the typed value of ``option`` for this build.

        Falls back to ``default`` when the value is unset, equals the option's
        ``ignore_if`` value, cannot be coerced, or when a registry is attached
        and ``option`` is not the spec registered under its id.
        """
        if self.registry is not None and not self.registry.is_registered(option):
            return default

        raw = self.values.get(option.id)
        if raw is None:
            return default

        try:
            value = option.coerce(raw)
        except ValueError as e:
            logger.warning(f"{e}, using default {default!r}")
            return default

        if option.ignore_if is not None and value == option.ignore_if:
            return default
        return value

    def set(self, option: OptionSpec, value: Any) -> None:
        self.values[option.id] = value
