"""FastAPI integration for composite."""

from composite.api.params import (
    configure_error_handlers,
    nested_query_params,
    parse_nested_params,
    split_key,
)

__all__ = ["configure_error_handlers", "nested_query_params", "parse_nested_params", "split_key"]
