# src/composite/core/options.py
"""Option models and callable inspection shared by the builder and the engine."""

import inspect
from collections.abc import Mapping, Sequence, Set
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, ValidationError

from composite.exceptions import ConfigurationError


def default_ignore(value: Any) -> bool:
    """
    Default ignore predicate.

    Returns `True` if the value is `None`, an empty string, or an empty
    list, tuple, set or mapping.
    """
    if value is None:
        return True
    if isinstance(value, (str, bytes, Sequence, Set, Mapping)):
        return len(value) == 0
    return False


class HandlerKind(str, Enum):
    """How a handler or loader is invoked, decided once at registration."""
    UNARY = "unary"    # f(query)
    BINARY = "binary"  # f(query, value) for params, f(query, params) for dependencies


class CompositeOptions(BaseModel):
    """Options accepted by `Composite.new()` and `Composite.bound()`."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    strict: bool = False
    ignore: Callable[[Any], bool] = default_ignore


class ParamOptions(BaseModel):
    """Options accepted by `Composite.param()`."""
    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    ignore: Optional[Callable[[Any], bool]] = None
    on_ignore: Optional[Callable[[Any], Any]] = None
    requires: Any = None
    ignore_requires: Any = None


class DependencyOptions(BaseModel):
    """Options accepted by `Composite.dependency()`."""
    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    requires: Any = None


def build_options(model: Type[BaseModel], opts: Dict[str, Any]) -> BaseModel:
    """Validate keyword options against `model`, naming any unsupported keys."""
    unknown = sorted(set(opts) - set(model.model_fields))
    if unknown:
        raise ConfigurationError(f"Unsupported options: {unknown}", unknown_keys=unknown)
    try:
        return model(**opts)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid options: {exc}") from exc


def wrap(value: Any) -> List[Any]:
    """Normalize `None`, a scalar or a list/tuple/set into a list."""
    if value is None:
        return []
    if isinstance(value, (list, tuple, Set)):
        return list(value)
    return [value]


def callable_kind(func: Any, role: str) -> HandlerKind:
    """
    Inspect a callable and decide whether it takes one or two positional arguments.

    Raises `ConfigurationError` for anything else, including callables whose
    signature can't be introspected or that accept `*args`.
    """
    if not callable(func):
        raise ConfigurationError(f"{role} must be callable, got {func!r}")

    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Cannot inspect the signature of {role} {func!r}") from exc

    positional = [
        p for p in signature.parameters.values()
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
    ]
    variadic = any(p.kind is p.VAR_POSITIONAL for p in signature.parameters.values())
    required_keywords = [
        p for p in signature.parameters.values()
        if p.kind is p.KEYWORD_ONLY and p.default is p.empty
    ]

    if variadic or required_keywords or len(positional) not in (1, 2):
        raise ConfigurationError(
            f"{role} must accept exactly 1 or 2 positional arguments, "
            f"got {func!r} with signature {signature}"
        )
    return HandlerKind.UNARY if len(positional) == 1 else HandlerKind.BINARY


def ensure_unary(func: Any, role: str) -> None:
    if callable_kind(func, role) is not HandlerKind.UNARY:
        raise ConfigurationError(f"{role} must accept exactly 1 positional argument, got {func!r}")
