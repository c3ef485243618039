"""
Ladon -- State Types

A State subclass describes one reachable condition of the software under
test. The class itself is the graph node; instances are only created by a
FiniteStateMachine when it moves into that state.

Every concrete subclass is recorded in a registered-subtype table, keyed by
its qualified name. Graphs use the table to decide what is a valid state type
and transitions use it to resolve targets named by string.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from ladon.errors import MissingImplementationError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ladon.modeler.contexts import ModelContext
    from ladon.modeler.transition import Transition

_REGISTRY: dict[str, type[State]] = {}


class State:
    """
    Base type for graph nodes.

    Subclasses must override ``transitions()``. Instances receive the model's
    ModelContext so they can reach the driver, client or fixture objects the
    model was built with.
    """

    state_name: ClassVar[str] = ""
    _registered: ClassVar[bool] = False

    def __init_subclass__(cls, register: bool = True, **kwargs: object) -> None:
        super().__init_subclass__(**kwargs)
        cls.state_name = f"{cls.__module__}.{cls.__qualname__}"
        cls._registered = register
        if register:
            _REGISTRY[cls.state_name] = cls

    def __init__(self, context: ModelContext | None = None) -> None:
        self.context = context

    @classmethod
    def transitions(cls) -> Iterable[Transition]:
        """Transitions available from instances of this state type."""
        raise MissingImplementationError(f"{cls.__qualname__}.transitions")

    def __repr__(self) -> str:
        return f"<{type(self).__qualname__}>"


def is_state_type(candidate: object) -> bool:
    """True for State subclasses declared with registration on (never State itself)."""
    return (
        isinstance(candidate, type)
        and issubclass(candidate, State)
        and candidate.__dict__.get("_registered", False)
    )


def state_type_for(name: str) -> type[State] | None:
    """
    Look up a registered state type.

    Accepts a fully qualified name (``pkg.states.LoginPage``) or a bare class
    name when that bare name is unambiguous.
    """
    found = _REGISTRY.get(name)
    if found is not None:
        return found
    matches = [cls for key, cls in _REGISTRY.items() if key.rsplit(".", 1)[-1] == name]
    return matches[0] if len(matches) == 1 else None


def registered_state_types() -> list[type[State]]:
    return list(_REGISTRY.values())
