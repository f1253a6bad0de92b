"""
composite-py: compose dynamic queries from input parameters.
"""
from composite.core import Composite, HandlerKind, default_ignore, setup_logging
from composite.exceptions import (
    BindingError,
    CircularDependencyError,
    CompositeError,
    ConfigurationError,
    DependencyError,
    DoubleBindingError,
    UnboundFieldError,
    UnknownDependencyError,
    UnknownParameterError,
)

__version__ = "0.5.0"

__all__ = [
    "Composite",
    "HandlerKind",
    "default_ignore",
    "setup_logging",
    "CompositeError",
    "ConfigurationError",
    "BindingError",
    "UnboundFieldError",
    "DoubleBindingError",
    "DependencyError",
    "UnknownDependencyError",
    "CircularDependencyError",
    "UnknownParameterError",
]
