"""
Ladon -- Finite State Machine

A Graph with a live ``current_state`` instance and a protocol for moving it.

``make_transition`` runs five stages:
  1. Read      all transitions for the current state's type, loading them
               on demand when the state was loaded lazily
  2. Prefilter optional caller filter AND the model-level ``passes_prefilter``
  3. Validate  keep transitions whose guards accept the current state
  4. Select    ``selection_strategy`` picks exactly one (subclasses must override)
  5. Execute   run its actions, then replace the current state with a new
               instance of the transition's target type

The current state is never mutated by the machine, only replaced.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from ladon.errors import InvalidSelectionError, MissingImplementationError, NoCurrentStateError
from ladon.modeler.contexts import ModelContext
from ladon.modeler.graph import Graph
from ladon.modeler.load_strategy import LoadStrategy
from ladon.modeler.transition import Transition

if TYPE_CHECKING:
    from ladon.config import Config
    from ladon.modeler.state import State

TransitionFilter = Callable[[Transition], Any]


class FiniteStateMachine(Graph):
    """
    Executable graph model.

    Subclasses must implement ``selection_strategy``. They may override
    ``passes_prefilter`` to exclude transitions model-wide and
    ``new_state_instance`` to customise how states are constructed.
    """

    def __init__(
        self,
        config: Config | None = None,
        context: ModelContext | None = None,
    ) -> None:
        super().__init__(config)
        self.context = context if context is not None else ModelContext()
        self._current_state: State | None = None

    @property
    def current_state(self) -> State | None:
        return self._current_state

    def new_state_instance(self, state_type: type[State]) -> State:
        """Instantiate ``state_type`` with this machine's context."""
        return state_type(self.context)

    def use_state_type(
        self,
        state_type: type[State],
        strategy: LoadStrategy = LoadStrategy.LAZY,
    ) -> State:
        """Move to a fresh instance of ``state_type``, loading it first if unknown."""
        if not self.state_loaded(state_type):
            self.load_state_type(state_type, strategy)
        self._current_state = self.new_state_instance(state_type)
        self._log.debug("current_state_changed", state=state_type.state_name)
        return self._current_state

    # ── Transition pipeline ──────────────────────────────────────

    def make_transition(self, extra_filter: TransitionFilter | None = None) -> State:
        """
        Execute one transition from the current state.

        ``extra_filter`` is an optional per-call prefilter; a transition is
        kept only if it returns exactly True.

        Raises:
            NoCurrentStateError: there is no current state.
            InvalidSelectionError: the selection strategy did not return a Transition.
        """
        if self._current_state is None:
            raise NoCurrentStateError("No current state to transition from")
        state_type = type(self._current_state)
        if not self.transitions_loaded(state_type):
            self.load_transitions(state_type, LoadStrategy.LAZY)
        options = self.transitions_for(state_type)
        prefiltered = self.prefiltered_transitions(options, extra_filter)
        valid = self.valid_transitions(prefiltered)
        return self.execute_transition(self.selection_strategy(valid))

    def prefiltered_transitions(
        self,
        options: Iterable[Transition],
        extra_filter: TransitionFilter | None = None,
    ) -> list[Transition]:
        return [
            transition
            for transition in options
            if (extra_filter is None or extra_filter(transition) is True)
            and self.passes_prefilter(transition)
        ]

    def passes_prefilter(self, transition: Transition) -> bool:
        """Model-level acceptance filter. Accepts everything unless overridden."""
        return True

    def valid_transitions(self, options: Iterable[Transition]) -> list[Transition]:
        """Transitions from ``options`` whose guards accept the current state."""
        if self._current_state is None:
            raise NoCurrentStateError("No current state to validate against")
        state = self._current_state
        return [transition for transition in options if transition.valid_for(state)]

    def selection_strategy(self, options: list[Transition]) -> Transition:
        """Pick the transition to execute from the currently valid ``options``."""
        raise MissingImplementationError(f"{type(self).__name__}.selection_strategy")

    def execute_transition(self, transition: Transition) -> State:
        """Run ``transition`` against the current state and move to its target."""
        if not isinstance(transition, Transition):
            raise InvalidSelectionError(
                f"Expected a single Transition to execute, got {transition!r}"
            )
        if self._current_state is None:
            raise NoCurrentStateError("No current state to transition from")
        transition.execute(self._current_state)
        transition.load_target()
        return self.use_state_type(transition.identify_target())


FSM = FiniteStateMachine
