"""
Ladon -- Model Contexts

A Context is a named object that state instances need in order to interact
with the software under test (a web driver, an API client, a fixture...).

Contexts are collected into a ModelContext which the state machine passes to
every state it instantiates. States read what they need via ``ctx.get(name)``
or ``ctx[name]`` rather than having attributes injected into them.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Context:
    name: str
    obj: Any


class ModelContext(Mapping[str, Any]):
    """Read-mostly registry of named contexts. Merges keep existing entries."""

    def __init__(self, contexts: Mapping[str, Context] | list[Context] | None = None) -> None:
        self._contexts: dict[str, Context] = {}
        if contexts:
            self.merge(contexts)

    def merge(self, contexts: Mapping[str, Context] | list[Context]) -> None:
        """
        Add contexts. On a name conflict the context already held wins.

        Raises TypeError for entries that are not Context instances and
        ValueError when a mapping key differs from its context's name.
        """
        items = list(contexts.items()) if isinstance(contexts, Mapping) else [
            (getattr(ctx, "name", None), ctx) for ctx in contexts
        ]
        for name, ctx in items:
            if not isinstance(ctx, Context):
                raise TypeError(f"Invalid context detected: {ctx!r}")
            if name != ctx.name:
                raise ValueError(f"Context name '{ctx.name}' does not match its key '{name}'")
            self._contexts.setdefault(name, ctx)

    def context(self, name: str) -> Context | None:
        return self._contexts.get(name)

    def __getitem__(self, name: str) -> Any:
        return self._contexts[name].obj

    def __iter__(self) -> Iterator[str]:
        return iter(self._contexts)

    def __len__(self) -> int:
        return len(self._contexts)

    def __repr__(self) -> str:
        return f"ModelContext({sorted(self._contexts)!r})"
