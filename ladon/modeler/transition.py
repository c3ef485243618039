"""
Ladon -- Transitions

A Transition is a guarded edge from one state type to another.

  guards    ``fn(state) -> bool``; the transition is valid when it has no
            guards or when at least one guard returns exactly ``True``
  actions   ``fn(state) -> Any``; run in registration order on execute
  metadata  arbitrary key/value pairs, e.g. weights used by a selection strategy

The target state type is resolved in two steps so that a model can point at
a state defined in a module that has not been imported yet:

  loader      runs once and makes the target importable (usually an import)
  identifier  returns the target: a State subclass or a registered state name

Lifecycle: declared -> target loaded -> target identified (memoised).
Neither resolver slot may be replaced once the target is loaded.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ladon.errors import (
    AlreadyLoadedError,
    BlockRequiredError,
    InvalidStateTypeError,
    MissingImplementationError,
    TargetNotLoadedError,
)
from ladon.modeler.state import is_state_type, state_type_for

if TYPE_CHECKING:
    from ladon.modeler.state import State

Guard = Callable[[Any], Any]
Action = Callable[[Any], Any]


def _require_callable(fn: object, what: str) -> None:
    if not callable(fn):
        raise BlockRequiredError(f"A callable is required for {what}, got {fn!r}")


class Transition:
    """A guarded, deferred-resolvable edge between state types."""

    def __init__(
        self,
        *,
        guards: list[Guard] | None = None,
        actions: list[Action] | None = None,
        metadata: dict[Any, Any] | None = None,
    ) -> None:
        self._guards: list[Guard] = []
        self._actions: list[Action] = []
        self.metadata: dict[Any, Any] = dict(metadata or {})

        self._loader: Callable[[], Any] | None = None
        self._identifier: Callable[[], Any] | None = None
        self._target_type: type[State] | None = None
        self._target_loaded = False

        for guard in guards or []:
            self.when(guard)
        for action in actions or []:
            self.by(action)

    @classmethod
    def to(cls, target: type[State] | str, **kwargs: Any) -> Transition:
        """Transition whose identifier returns ``target`` (a state type or registered name)."""
        transition = cls(**kwargs)
        transition.to_identify_target(lambda: target)
        return transition

    # ── Declaration ──────────────────────────────────────────────

    def when(self, guard: Guard) -> Guard:
        """Add a guard. Returns it, so this also works as a decorator."""
        _require_callable(guard, "a transition guard")
        self._guards.append(guard)
        return guard

    def by(self, action: Action) -> Action:
        """Add an action. Returns it, so this also works as a decorator."""
        _require_callable(action, "a transition action")
        self._actions.append(action)
        return action

    def meta(self, key: Any, value: Any) -> Any:
        """Set metadata, overwriting any existing value for ``key``."""
        self.metadata[key] = value
        return value

    def meta_for(self, key: Any, default: Any = None) -> Any:
        return self.metadata.get(key, default)

    @property
    def guards(self) -> tuple[Guard, ...]:
        return tuple(self._guards)

    @property
    def actions(self) -> tuple[Action, ...]:
        return tuple(self._actions)

    # ── Target resolution ────────────────────────────────────────

    @property
    def target_loaded(self) -> bool:
        return self._target_loaded

    def to_load_target(self, loader: Callable[[], Any]) -> None:
        """Register the routine that makes the target state type resolvable."""
        _require_callable(loader, "a target loader")
        if self._target_loaded:
            raise AlreadyLoadedError("Target state type is already loaded")
        if self._loader is not None:
            raise AlreadyLoadedError("A target loader is already registered")
        self._loader = loader

    def to_identify_target(self, identifier: Callable[[], Any]) -> None:
        """Register the routine that returns the target state type."""
        _require_callable(identifier, "a target identifier")
        if self._target_loaded:
            raise AlreadyLoadedError("Target state type is already loaded")
        if self._identifier is not None:
            raise AlreadyLoadedError("A target identifier is already registered")
        self._identifier = identifier

    def load_target(self) -> bool:
        """Run the loader, once. Without a loader there is nothing to load."""
        if self._target_loaded:
            return True
        if self._loader is not None:
            self._loader()
        self._target_loaded = True
        return True

    def identify_target(self) -> type[State]:
        """
        The target state type. Requires ``load_target()`` to have run.

        The first identified value is memoised; later calls never consult the
        identifier again.
        """
        if not self._target_loaded:
            raise TargetNotLoadedError("Target state type not loaded yet")
        if self._target_type is None:
            if self._identifier is None:
                raise MissingImplementationError("No target identifier registered")
            self._target_type = _resolve_state_type(self._identifier())
        return self._target_type

    # ── Evaluation ───────────────────────────────────────────────

    def valid_for(self, state: Any) -> bool:
        """True if there are no guards or any guard returns exactly True."""
        if not self._guards:
            return True
        return any(guard(state) is True for guard in self._guards)

    def execute(self, state: Any) -> list[Any]:
        """Run every action against ``state`` in order and return their results."""
        return [action(state) for action in self._actions]

    def __repr__(self) -> str:
        target = self._target_type.__qualname__ if self._target_type else "?"
        return (
            f"<Transition -> {target} "
            f"guards={len(self._guards)} actions={len(self._actions)}>"
        )


def _resolve_state_type(identified: Any) -> type[State]:
    if isinstance(identified, str):
        found = state_type_for(identified)
        if found is None:
            raise LookupError(f"No registered state type named '{identified}'")
        return found
    if not is_state_type(identified):
        raise InvalidStateTypeError(identified)
    return identified
