"""
Ladon -- Graph

Models software as a graph of State types connected by Transitions.

The graph grows on demand. ``load_state_type`` adds a node and, depending on
the LoadStrategy, its outgoing transitions and their targets. A state is
marked loaded *before* its transitions are explored, so EAGER loading of a
cyclic graph visits each node once and terminates.

Nothing is ever removed: ``states`` and every transition set only grow.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

import structlog

from ladon.config import Config
from ladon.errors import InvalidMergeError, InvalidStateTypeError, UnknownStateError
from ladon.modeler.load_strategy import LoadStrategy
from ladon.modeler.state import is_state_type
from ladon.modeler.transition import Transition

if TYPE_CHECKING:
    from ladon.modeler.state import State

logger = structlog.get_logger().bind(system="ladon.modeler.graph")


class Graph:
    """
    Registry of loaded state types and their transition sets.

    Override ``on_invalid_transitions`` to react to entries returned by a
    state's ``transitions()`` that are not Transition instances.
    """

    def __init__(self, config: Config | None = None) -> None:
        self.config = config if config is not None else Config()
        self._states: set[type[State]] = set()
        self._transitions: dict[type[State], set[Transition]] = {}
        self._log = logger.bind(graph=type(self).__name__, config_id=self.config.id)

    # ── Queries ──────────────────────────────────────────────────

    @property
    def states(self) -> frozenset[type[State]]:
        return frozenset(self._states)

    @property
    def transitions(self) -> Mapping[type[State], frozenset[Transition]]:
        """Read-only snapshot of state type -> transition set (only loaded sets)."""
        return MappingProxyType(
            {state_type: frozenset(found) for state_type, found in self._transitions.items()}
        )

    @property
    def state_count(self) -> int:
        return len(self._states)

    def valid_state(self, state_type: Any) -> bool:
        """Whether ``state_type`` may be a node of this graph."""
        return is_state_type(state_type)

    def state_loaded(self, state_type: Any) -> bool:
        return state_type in self._states

    def transitions_loaded(self, state_type: Any) -> bool:
        return self.state_loaded(state_type) and state_type in self._transitions

    def transitions_for(self, state_type: Any) -> frozenset[Transition]:
        return frozenset(self._transitions.get(state_type, ()))

    def transition_count_for(self, state_type: Any) -> int:
        if not self.transitions_loaded(state_type):
            return 0
        return len(self._transitions[state_type])

    # ── Hooks ────────────────────────────────────────────────────

    def on_invalid_transitions(self, invalid: list[Any]) -> None:
        """Called with entries from ``transitions()`` that are not Transitions."""

    # ── Loading ──────────────────────────────────────────────────

    def load_state_type(
        self,
        state_type: Any,
        strategy: LoadStrategy = LoadStrategy.LAZY,
    ) -> bool:
        """
        Load ``state_type`` into this graph.

        Returns True if the state is now (or was already) loaded, False when
        the strategy is NONE.

        Raises:
            InvalidStateTypeError: ``state_type`` is not a valid state type.
        """
        if not self.valid_state(state_type):
            raise InvalidStateTypeError(state_type)
        if self.state_loaded(state_type):
            return True
        strategy = LoadStrategy(strategy)
        if strategy == LoadStrategy.NONE:
            return False

        # Mark loaded first: this is what makes cyclic EAGER loads terminate
        self._states.add(state_type)
        self._log.debug("state_loaded", state=state_type.state_name, strategy=strategy.value)
        self.load_transitions(state_type, strategy.nested())
        return True

    def load_transitions(
        self,
        state_type: Any,
        strategy: LoadStrategy = LoadStrategy.LAZY,
    ) -> bool:
        """
        Load the transitions declared by ``state_type.transitions()``.

        For adding transitions by hand, see ``add_transitions``.

        Raises:
            UnknownStateError: ``state_type`` is not loaded in this graph.
        """
        if not self.state_loaded(state_type):
            raise UnknownStateError(state_type)
        if self.transitions_loaded(state_type):
            return True
        strategy = LoadStrategy(strategy)
        if strategy == LoadStrategy.NONE:
            return False

        added = self.add_transitions(state_type, state_type.transitions())

        next_strategy = strategy.nested()
        if added and next_strategy != LoadStrategy.NONE:
            for transition in added:
                transition.load_target()
                self.load_state_type(transition.identify_target(), next_strategy)
        return True

    def add_transitions(
        self,
        state_type: Any,
        candidates: Iterable[Any],
    ) -> set[Transition]:
        """
        Union ``candidates`` into the transition set of ``state_type``.

        Entries that are not Transitions go to ``on_invalid_transitions``.
        Returns only the transitions that were not already present.

        Raises:
            UnknownStateError: ``state_type`` is not loaded in this graph.
        """
        if not self.state_loaded(state_type):
            raise UnknownStateError(state_type)

        valid: list[Transition] = []
        invalid: list[Any] = []
        for candidate in candidates or ():
            (valid if isinstance(candidate, Transition) else invalid).append(candidate)
        if invalid:
            self._log.warning(
                "invalid_transitions",
                state=state_type.state_name,
                count=len(invalid),
            )
            self.on_invalid_transitions(invalid)

        existing = self._transitions.setdefault(state_type, set())
        added = set(valid) - existing
        existing |= added
        return added

    # ── Merging ──────────────────────────────────────────────────

    def merge(self, other: Graph) -> None:
        """
        Merge ``other`` into this graph. Entries already held here win.

        Raises:
            InvalidMergeError: the graphs are not of the same concrete class.
        """
        if type(self) is not type(other):
            raise InvalidMergeError(
                f"Cannot merge {type(other).__name__} into {type(self).__name__}"
            )
        for state_type in other.states:
            self.load_state_type(state_type)
        for state_type, transitions in other.transitions.items():
            self._transitions.setdefault(state_type, set()).update(transitions)

        self._log.info(
            "graph_merged",
            state_count=self.state_count,
            merged_from=other.config.id,
        )
