"""
Ladon -- Flags

A Flag declares one external input a Bundle understands. Flags are declared
as class attributes and resolved against an instance:

  1. the value in the instance's config flags, if present
  2. otherwise ``default_<name>()`` on the class, if ``class_override`` is set
     and the class defines it
  3. otherwise the flag's ``default``

An optional ``validator(value) -> bool`` guards the resolved value and an
optional ``handler(bundle, value)`` lets a flag carry behaviour that any
subclass gets for free (the instance is passed explicitly).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ladon.errors import BlockRequiredError, InvalidFlagValueError


@dataclass(frozen=True)
class Flag:
    name: str
    description: str | None = None
    default: Any = None
    class_override: bool = False
    validator: Callable[[Any], bool] | None = None
    handler: Callable[[Any, Any], Any] | None = None

    @property
    def override_method(self) -> str:
        return f"default_{self.name}"

    def value_for(self, bundle: Any) -> Any:
        """Resolve this flag's value for ``bundle``."""
        if bundle.config.has_flag(self.name):
            value = bundle.config.flag(self.name)
        else:
            value = self.default
            if self.class_override:
                override = getattr(type(bundle), self.override_method, None)
                if callable(override):
                    value = override()

        if self.validator is not None and self.validator(value) is not True:
            raise InvalidFlagValueError(self.name, value)
        return value

    def feed(self, bundle: Any) -> Any:
        """Run the handler with the value resolved for ``bundle``."""
        if self.handler is None:
            raise BlockRequiredError(f"Flag '{self.name}' has no handler to feed")
        return self.handler(bundle, self.value_for(bundle))

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "default": self.default,
            "class_override": self.class_override,
            "has_validator": self.validator is not None,
            "has_handler": self.handler is not None,
        }


class HasFlags:
    """Mixin for classes that declare Flags. Instances need a ``config`` attribute."""

    @classmethod
    def all_flags(cls) -> list[Flag]:
        """Flags declared on this class and its bases; subclasses shadow by attribute name."""
        seen: dict[str, Flag] = {}
        for klass in cls.__mro__:
            for attr, value in vars(klass).items():
                if isinstance(value, Flag) and attr not in seen:
                    seen[attr] = value
        return list(seen.values())

    def flag_value(self, flag: Flag) -> Any:
        return flag.value_for(self)

    def handle_flag(self, flag: Flag) -> Any:
        return flag.feed(self)

    def resolved_flags(self) -> dict[str, Any]:
        """Every declared flag's value for this instance."""
        return {flag.name: flag.value_for(self) for flag in self.all_flags()}
