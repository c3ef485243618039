"""
Ladon -- Modeler

Describes software under test as a graph of State types joined by
Transitions, and drives a live FiniteStateMachine through that graph.

Public interface:
  State               base class for graph nodes
  Transition          guarded, deferred-resolvable edge
  LoadStrategy        how far a load operation expands
  Graph               incremental registry of states and transitions
  FiniteStateMachine  Graph plus a current state and the transition pipeline
  Context             named object handed to state instances via ModelContext
"""

from ladon.modeler.contexts import Context, ModelContext
from ladon.modeler.fsm import FSM, FiniteStateMachine
from ladon.modeler.graph import Graph
from ladon.modeler.load_strategy import LoadStrategy, nested_strategy_for
from ladon.modeler.state import State, is_state_type, registered_state_types, state_type_for
from ladon.modeler.transition import Transition

__all__ = [
    "Context",
    "FSM",
    "FiniteStateMachine",
    "Graph",
    "LoadStrategy",
    "ModelContext",
    "State",
    "Transition",
    "is_state_type",
    "nested_strategy_for",
    "registered_state_types",
    "state_type_for",
]
