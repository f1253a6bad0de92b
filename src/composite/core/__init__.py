"""Core of composite: the builder, the dependency resolver and the application engine."""

from composite.core.composite import Composite, ParamDefinition
from composite.core.logging import log, setup_logging
from composite.core.options import HandlerKind, default_ignore
from composite.core.resolver import DependencyDefinition, load_dependencies

__all__ = [
    "Composite",
    "ParamDefinition",
    "DependencyDefinition",
    "HandlerKind",
    "default_ignore",
    "load_dependencies",
    "log",
    "setup_logging",
]
