"""
Ladon -- Load Strategies

How far a Graph expands when asked to load a state type or its transitions.

  NONE       do not perform the load at all
  LAZY       load only the target state (or transition set)
  CONNECTED  load the target, then its directly connected pieces LAZY-ily
  EAGER      load the target and recurse until the reachable graph is loaded
"""

from __future__ import annotations

import enum


class LoadStrategy(str, enum.Enum):
    NONE = "none"
    LAZY = "lazy"
    CONNECTED = "connected"
    EAGER = "eager"

    def nested(self) -> LoadStrategy:
        """The strategy to apply one level deeper than this one."""
        return _NESTING[self]


_NESTING: dict[LoadStrategy, LoadStrategy] = {
    LoadStrategy.NONE: LoadStrategy.NONE,
    LoadStrategy.LAZY: LoadStrategy.NONE,
    LoadStrategy.CONNECTED: LoadStrategy.LAZY,
    LoadStrategy.EAGER: LoadStrategy.EAGER,
}


def nested_strategy_for(strategy: LoadStrategy | str) -> LoadStrategy:
    """Decay ``strategy`` by one level. Raises ValueError for unknown strategies."""
    return LoadStrategy(strategy).nested()
