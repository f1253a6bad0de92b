# src/composite/exceptions.py
"""Errors raised while building or applying a composite."""

from typing import Any, Hashable, Iterable, List, Sequence, Tuple


class CompositeError(Exception):
    """Base class for every error raised by composite."""


class ConfigurationError(CompositeError, TypeError):
    """Raised when a registration is given unsupported options or callables."""

    def __init__(self, message: str, unknown_keys: Sequence[str] = ()):
        super().__init__(message)
        self.unknown_keys = list(unknown_keys)


class BindingError(CompositeError):
    """Raised when the query or params of a composite are bound incorrectly."""

    def __init__(self, message: str, field: str):
        super().__init__(message)
        self.field = field


class UnboundFieldError(BindingError):
    """Raised when neither construction nor application supplied a value."""

    def __init__(self, field: str):
        super().__init__(f"`{field}` is not set", field)


class DoubleBindingError(BindingError):
    """Raised when a value is supplied for a field that is already bound."""

    def __init__(self, field: str):
        super().__init__(f"`{field}` has already been provided", field)


class DependencyError(CompositeError):
    """Base class for dependency resolution failures."""


class UnknownDependencyError(DependencyError):
    """Raised when a required dependency was never declared."""

    def __init__(self, dependency: Hashable):
        super().__init__(
            f"Unknown dependency: `{dependency}`. "
            "Please declare this dependency using Composite.dependency()"
        )
        self.dependency = dependency


class CircularDependencyError(DependencyError):
    """Raised when dependencies require each other in a loop."""

    def __init__(self, chain: Iterable[Hashable]):
        self.chain = list(chain)
        super().__init__(
            "Circular dependency detected: "
            + " -> ".join(f"`{name}`" for name in self.chain)
        )


class UnknownParameterError(CompositeError):
    """Raised in strict mode when params contain undeclared paths."""

    def __init__(self, paths: List[Tuple[Any, ...]]):
        self.paths = paths
        super().__init__(
            "Unknown parameters found under the following paths: "
            + ", ".join(repr(list(path)) for path in paths)
        )
