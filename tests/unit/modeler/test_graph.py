"""
Tests for Graph.

Covers:
  - Load strategies (NONE / LAZY / CONNECTED / EAGER) and cycle termination
  - Transition set semantics and invalid-entry handling
  - Merging
"""

from __future__ import annotations

import pytest

from ladon.config import Config
from ladon.errors import (
    InvalidMergeError,
    InvalidStateTypeError,
    MissingImplementationError,
    UnknownStateError,
)
from ladon.modeler.fsm import FiniteStateMachine
from ladon.modeler.graph import Graph
from ladon.modeler.load_strategy import LoadStrategy
from ladon.modeler.state import State
from ladon.modeler.transition import Transition


class CycleStart(State):
    @classmethod
    def transitions(cls):
        return [Transition.to(CycleEnd)]


class CycleEnd(State):
    @classmethod
    def transitions(cls):
        return [Transition.to(CycleStart)]


class ChainHead(State):
    @classmethod
    def transitions(cls):
        return [Transition.to(ChainMiddle)]


class ChainMiddle(State):
    @classmethod
    def transitions(cls):
        return [Transition.to(ChainTail)]


class ChainTail(State):
    @classmethod
    def transitions(cls):
        return []


class Untransitioned(State):
    pass


class Unregistered(State, register=False):
    @classmethod
    def transitions(cls):
        return []


class Messy(State):
    @classmethod
    def transitions(cls):
        return [Transition.to(ChainTail), "not a transition", 42]


class RecordingGraph(Graph):
    def __init__(self, config=None):
        super().__init__(config)
        self.invalid_seen = []

    def on_invalid_transitions(self, invalid):
        self.invalid_seen.extend(invalid)


class TestLoadStateType:
    def test_none_strategy_loads_nothing(self):
        graph = Graph()
        assert graph.load_state_type(ChainHead, LoadStrategy.NONE) is False
        assert graph.state_count == 0

    def test_lazy_loads_only_the_state(self):
        graph = Graph()
        assert graph.load_state_type(ChainHead, LoadStrategy.LAZY) is True
        assert graph.states == {ChainHead}
        assert graph.transitions_loaded(ChainHead) is False

    def test_connected_loads_transitions_but_not_targets(self):
        graph = Graph()
        graph.load_state_type(ChainHead, LoadStrategy.CONNECTED)
        assert graph.states == {ChainHead}
        assert graph.transitions_loaded(ChainHead) is True
        assert graph.transition_count_for(ChainHead) == 1

    def test_eager_loads_everything_reachable(self):
        graph = Graph()
        graph.load_state_type(ChainHead, LoadStrategy.EAGER)
        assert graph.states == {ChainHead, ChainMiddle, ChainTail}
        assert all(graph.transitions_loaded(s) for s in graph.states)
        assert graph.transition_count_for(ChainTail) == 0

    def test_eager_load_of_cycle_terminates(self):
        graph = Graph()
        assert graph.load_state_type(CycleStart, LoadStrategy.EAGER) is True
        assert graph.states == {CycleStart, CycleEnd}
        assert graph.transition_count_for(CycleStart) == 1
        assert graph.transition_count_for(CycleEnd) == 1

    def test_reloading_is_a_no_op(self):
        graph = Graph()
        graph.load_state_type(CycleStart, LoadStrategy.EAGER)
        before = graph.transitions_for(CycleStart)
        assert graph.load_state_type(CycleStart, LoadStrategy.EAGER) is True
        assert graph.transitions_for(CycleStart) == before

    def test_loaded_state_ignores_later_none_strategy(self):
        graph = Graph()
        graph.load_state_type(ChainTail)
        assert graph.load_state_type(ChainTail, LoadStrategy.NONE) is True

    @pytest.mark.parametrize("candidate", [State, Unregistered, int, "ChainHead", None])
    def test_rejects_invalid_state_types(self, candidate):
        with pytest.raises(InvalidStateTypeError):
            Graph().load_state_type(candidate)

    def test_state_without_transitions_override(self):
        graph = Graph()
        graph.load_state_type(Untransitioned)
        with pytest.raises(MissingImplementationError):
            graph.load_transitions(Untransitioned)


class TestTransitions:
    def test_load_transitions_requires_loaded_state(self):
        with pytest.raises(UnknownStateError):
            Graph().load_transitions(ChainHead)

    def test_add_transitions_requires_loaded_state(self):
        with pytest.raises(UnknownStateError):
            Graph().add_transitions(ChainHead, [Transition.to(ChainTail)])

    def test_add_transitions_returns_only_new_entries(self):
        graph = Graph()
        graph.load_state_type(ChainHead)
        transition = Transition.to(ChainTail)

        assert graph.add_transitions(ChainHead, [transition]) == {transition}
        assert graph.add_transitions(ChainHead, [transition]) == set()
        assert graph.transition_count_for(ChainHead) == 1

    def test_invalid_entries_are_reported_not_stored(self):
        graph = RecordingGraph()
        graph.load_state_type(Messy, LoadStrategy.CONNECTED)
        assert graph.invalid_seen == ["not a transition", 42]
        assert graph.transition_count_for(Messy) == 1

    def test_transition_views_are_read_only(self):
        graph = Graph()
        graph.load_state_type(ChainHead, LoadStrategy.CONNECTED)
        with pytest.raises(TypeError):
            graph.transitions[ChainTail] = set()
        with pytest.raises(AttributeError):
            graph.transitions[ChainHead].add(Transition.to(ChainTail))
        assert graph.transition_count_for(ChainHead) == 1
        assert isinstance(graph.transitions_for(ChainHead), frozenset)

    def test_unknown_state_queries(self):
        graph = Graph()
        assert graph.state_loaded(ChainHead) is False
        assert graph.transitions_loaded(ChainHead) is False
        assert graph.transitions_for(ChainHead) == frozenset()
        assert graph.transition_count_for(ChainHead) == 0


class TestMerge:
    def test_merge_disjoint_graphs(self):
        left, right = Graph(), Graph()
        left.load_state_type(ChainHead)
        right.load_state_type(CycleStart, LoadStrategy.EAGER)

        left.merge(right)

        assert left.states == {ChainHead, CycleStart, CycleEnd}
        assert left.transitions_for(CycleEnd) == right.transitions_for(CycleEnd)

    def test_merge_unions_transition_sets(self):
        shared = Transition.to(ChainTail)
        extra = Transition.to(ChainMiddle)
        left, right = Graph(), Graph()
        for graph in (left, right):
            graph.load_state_type(ChainHead)
            graph.add_transitions(ChainHead, [shared])
        right.add_transitions(ChainHead, [extra])

        left.merge(right)

        assert left.transitions_for(ChainHead) == {shared, extra}

    def test_merge_leaves_other_untouched(self):
        left, right = Graph(), Graph()
        left.load_state_type(ChainHead)
        right.load_state_type(ChainTail)
        left.merge(right)
        assert right.states == {ChainTail}

    def test_merge_requires_same_class(self):
        with pytest.raises(InvalidMergeError):
            Graph().merge(FiniteStateMachine())
        with pytest.raises(InvalidMergeError):
            Graph().merge(RecordingGraph())

    def test_graph_keeps_its_config(self):
        config = Config(id="graph-1")
        assert Graph(config).config is config
        assert Graph().config.id
