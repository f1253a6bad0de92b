# src/composite/core/resolver.py
"""Lazy, once-per-pass loading of dependencies."""

from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Hashable, Iterable, Tuple

from composite.core.logging import log
from composite.core.options import DependencyOptions, HandlerKind, wrap
from composite.exceptions import CircularDependencyError, UnknownDependencyError


@dataclass(frozen=True)
class DependencyDefinition:
    """A registered dependency loader and its own prerequisites."""
    loader: Callable[..., Any]
    kind: HandlerKind
    options: DependencyOptions

    def load(self, query: Any, params: Any) -> Any:
        if self.kind is HandlerKind.BINARY:
            return self.loader(query, params)
        return self.loader(query)


Loaded = FrozenSet[Hashable]


def load_dependencies(
    query: Any,
    params: Any,
    definitions: Dict[Hashable, DependencyDefinition],
    loaded: Loaded,
    required: Iterable[Hashable],
    _chain: Tuple[Hashable, ...] = (),
) -> Tuple[Any, Loaded]:
    """
    Load every dependency in `required` that isn't in `loaded` yet.

    Prerequisites of a dependency are loaded before it, and each dependency
    is loaded at most once for a given `loaded` set. Returns the updated
    query together with the grown loaded set.
    """
    # Duplicates collapse; first-seen order is kept so passes are reproducible.
    to_load = [name for name in dict.fromkeys(required) if name not in loaded]
    if not to_load:
        return query, loaded

    for name in to_load:
        # A sibling's prerequisites may already have pulled this one in.
        if name in loaded:
            continue
        if name in _chain:
            raise CircularDependencyError(_chain[_chain.index(name):] + (name,))

        try:
            definition = definitions[name]
        except KeyError:
            raise UnknownDependencyError(name) from None

        query, loaded = load_dependencies(
            query,
            params,
            definitions,
            loaded,
            wrap(definition.options.requires),
            _chain + (name,),
        )

        log.debug("Loading dependency %r", name)
        query = definition.load(query, params)
        loaded = loaded | {name}

    return query, loaded
