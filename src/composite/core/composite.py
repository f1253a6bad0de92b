# src/composite/core/composite.py
"""
A utility for writing dynamic queries.

It removes the boilerplate of building a query from input parameters:

    params = {"search_query": "John Doe"}

    query = (
        Composite.bound(select(users).where(users.c.active), params)
        .param("org_id", filter_by_org_id)
        .param("search_query", search_by_full_name)
        .param("org_name", filter_by_org_name, requires="org")
        .param("org_type", filter_by_org_type, requires="org")
        .dependency("org", join_orgs)
    )
    session.execute(query)

SQLAlchemy is only used to make a composite executable out of the box.
Any value can be composed: applying a composite is an ordered fold of
handlers over the query.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Hashable, Tuple

from sqlalchemy import select
from sqlalchemy.sql.expression import FromClause

from composite.core.logging import log
from composite.core.options import (
    CompositeOptions,
    DependencyOptions,
    HandlerKind,
    ParamOptions,
    build_options,
    callable_kind,
    default_ignore,
    ensure_unary,
    wrap,
)
from composite.core.paths import Path, find_unknown_paths, get_in, is_plain_params
from composite.core.resolver import DependencyDefinition, Loaded, load_dependencies
from composite.exceptions import (
    ConfigurationError,
    DoubleBindingError,
    UnboundFieldError,
    UnknownParameterError,
)


@dataclass(frozen=True)
class ParamDefinition:
    """A registered param handler and the path its value is read from."""
    path: Path
    handler: Callable[..., Any]
    kind: HandlerKind
    options: ParamOptions

    def handle(self, query: Any, value: Any) -> Any:
        if self.kind is HandlerKind.BINARY:
            return self.handler(query, value)
        return self.handler(query)

    def required_dependencies(self, value: Any) -> list:
        """Dependencies to load before the handler; `requires` may depend on the value."""
        requires = self.options.requires
        if callable(requires):
            requires = requires(value)
        return wrap(requires)


def _normalize_path(path: Any) -> Path:
    return tuple(path) if isinstance(path, (list, tuple)) else (path,)


def _identity(query: Any) -> Any:
    return query


@dataclass(frozen=True)
class Composite:
    """
    Accumulated param handlers and dependency loaders, applied to a query in one pass.

    Every registration method returns a new composite, so a composite built
    once can be applied many times with different queries and params.
    """
    param_definitions: Tuple[ParamDefinition, ...] = ()
    dep_definitions: Dict[Hashable, DependencyDefinition] = field(default_factory=dict)
    params: Any = None
    input_query: Any = None
    required_deps: Tuple[Hashable, ...] = ()
    strict: bool = False
    ignore: Callable[[Any], bool] = field(default=default_ignore, repr=False)

    @classmethod
    def new(cls, **options: Any) -> "Composite":
        """
        Create a composite whose query and params are supplied later via `apply(query, params)`.

        Options:
            strict: raise `UnknownParameterError` when params contain paths
                that no `param()` declares. Defaults to `False`.
            ignore: predicate deciding whether a value is "empty" for params
                that don't set their own `ignore`. Defaults to `default_ignore`.
        """
        config = build_options(CompositeOptions, options)
        return cls(strict=config.strict, ignore=config.ignore)

    @classmethod
    def bound(cls, input_query: Any, params: Any, **options: Any) -> "Composite":
        """
        Create a composite with its query and params already bound.

        Apply it with `apply()`, or hand it straight to SQLAlchemy, which
        applies it when the statement is needed. Accepts the same options as `new()`.
        """
        config = build_options(CompositeOptions, options)
        return cls(
            params=params,
            input_query=input_query,
            strict=config.strict,
            ignore=config.ignore,
        )

    def param(self, path: Any, handler: Callable[..., Any], **opts: Any) -> "Composite":
        """
        Register a param handler.

        Handlers run in the order they are registered. `handler` receives the
        query, or the query and the param value. `path` is a key, or a list of
        keys for nested params.

        Options:
            ignore: predicate on the value; when it returns `True` the handler
                is skipped. Defaults to the composite's `ignore`.
            on_ignore: applied to the query instead of the handler when the
                value is ignored.
            requires: dependency name(s) loaded before the handler, or a
                function of the (not ignored) value returning them.
            ignore_requires: dependency name(s) loaded when the value is ignored.
        """
        path = _normalize_path(path)
        if not path:
            raise ConfigurationError("Param path must not be empty")
        kind = callable_kind(handler, "Param handler")
        options = build_options(ParamOptions, opts)
        if options.on_ignore is not None:
            ensure_unary(options.on_ignore, "on_ignore")

        definition = ParamDefinition(path, handler, kind, options)
        return replace(self, param_definitions=self.param_definitions + (definition,))

    def dependency(self, name: Hashable, loader: Callable[..., Any], **opts: Any) -> "Composite":
        """
        Register a dependency loader.

        A dependency is applied lazily, and at most once per `apply()`, no
        matter how many params or other dependencies require it. A loader
        taking two arguments receives all params as the second one.

        Options:
            requires: dependency name(s) loaded before this one.
        """
        kind = callable_kind(loader, "Dependency loader")
        options = build_options(DependencyOptions, opts)
        definitions = {**self.dep_definitions, name: DependencyDefinition(loader, kind, options)}
        return replace(self, dep_definitions=definitions)

    def force_require(self, dependencies: Any) -> "Composite":
        """Load dependencies on every `apply()`, even when no param requires them."""
        return replace(self, required_deps=tuple(wrap(dependencies)) + self.required_deps)

    def apply(self, input_query: Any = None, params: Any = None) -> Any:
        """
        Apply every handler to the query and return the result.

        Call it without arguments on a composite created by `bound()`, or with
        the query and params on one created by `new()`.
        """
        composite = self._set_once("input_query", input_query)._set_once("params", params)
        composite._check_unknown_params()

        log.debug(
            "Applying composite: %d params, %d dependencies, strict=%s",
            len(composite.param_definitions),
            len(composite.dep_definitions),
            composite.strict,
        )

        query, loaded = load_dependencies(
            composite.input_query,
            composite.params,
            composite.dep_definitions,
            frozenset(),
            composite.required_deps,
        )

        for definition in composite.param_definitions:
            query, loaded = composite._apply_param(definition, query, loaded)

        log.debug("Composite applied, %d dependencies loaded", len(loaded))
        return query

    def _apply_param(self, definition: ParamDefinition, query: Any, loaded: Loaded) -> Tuple[Any, Loaded]:
        value = get_in(self.params, definition.path)
        ignore = definition.options.ignore or self.ignore

        if ignore(value):
            log.debug("Ignoring param %r", list(definition.path))
            query, loaded = load_dependencies(
                query,
                self.params,
                self.dep_definitions,
                loaded,
                wrap(definition.options.ignore_requires),
            )
            on_ignore = definition.options.on_ignore or _identity
            return on_ignore(query), loaded

        query, loaded = load_dependencies(
            query,
            self.params,
            self.dep_definitions,
            loaded,
            definition.required_dependencies(value),
        )
        return definition.handle(query, value), loaded

    def _set_once(self, key: str, value: Any) -> "Composite":
        current = getattr(self, key)
        if value is None and current is None:
            raise UnboundFieldError(key)
        if value is None:
            return self
        if current is None:
            return replace(self, **{key: value})
        raise DoubleBindingError(key)

    def _check_unknown_params(self) -> None:
        if not self.strict or not is_plain_params(self.params):
            return

        declared = [definition.path for definition in self.param_definitions]
        unknown = find_unknown_paths(self.params, declared)
        if unknown:
            raise UnknownParameterError(unknown)

    def __clause_element__(self) -> Any:
        """Let SQLAlchemy execute a bound composite as a statement."""
        query = self.apply()
        if isinstance(query, FromClause):
            return select(query)
        return query

    def _execute_on_connection(self, connection, *args, **kwargs):
        # Connection.execute() dispatches here; Session.execute() checks for it after coercion.
        return self.__clause_element__()._execute_on_connection(connection, *args, **kwargs)
