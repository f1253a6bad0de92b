# src/composite/api/params.py
"""FastAPI helpers for feeding request query strings into a composite."""

import re
from typing import Any, Dict, Iterable, List, Tuple

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from composite.core.logging import log
from composite.exceptions import BindingError, ConfigurationError, DependencyError, UnknownParameterError

# `company[name]` -> ("company", "[name]"); `tags[]` -> ("tags", "[]")
_KEY_PATTERN = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_SEGMENT_PATTERN = re.compile(r"\[([^\[\]]*)\]")


def split_key(key: str) -> List[str]:
    """Split a bracketed query key into its path segments."""
    match = _KEY_PATTERN.match(key)
    if not match:
        return [key]
    head, rest = match.groups()
    return [head, *_SEGMENT_PATTERN.findall(rest)]


def parse_nested_params(items: Iterable[Tuple[str, Any]]) -> Dict[str, Any]:
    """
    Build nested params from flat query string pairs.

    `company[name]=Pear` becomes `{"company": {"name": "Pear"}}`, `tags[]=a&tags[]=b`
    becomes `{"tags": ["a", "b"]}`, and a plain key given more than once collects
    its values into a list. When a key is used both plainly and with brackets
    (`a=1&a[b]=2` or `a[b]=2&a=1`), the last one wins.
    """
    params: Dict[str, Any] = {}

    for key, value in items:
        parts = split_key(key)
        append = len(parts) > 1 and parts[-1] == ""
        if append:
            parts = parts[:-1]

        target = params
        for part in parts[:-1]:
            child = target.get(part)
            if not isinstance(child, dict):
                child = target[part] = {}
            target = child

        last = parts[-1]
        existing = target.get(last)
        if append:
            if isinstance(existing, list):
                existing.append(value)
            else:
                target[last] = [value]
        elif last in target and not isinstance(existing, dict):
            target[last] = existing + [value] if isinstance(existing, list) else [existing, value]
        else:
            target[last] = value

    return params


def nested_query_params(request: Request) -> Dict[str, Any]:
    """FastAPI dependency returning the request's query string as nested params."""
    return parse_nested_params(request.query_params.multi_items())


def configure_error_handlers(app: FastAPI) -> None:
    """
    Turn composite errors raised inside routes into JSON responses.

    Unknown params are the caller's fault and map to 400; the other errors
    are misconfigured composites and map to 500.
    """
    @app.exception_handler(UnknownParameterError)
    async def unknown_params_handler(request, exc: UnknownParameterError):
        log.warning("Rejected unknown params on %s: %s", request.url.path, exc.paths)
        return JSONResponse(
            status_code=400,
            content={
                "error": True,
                "message": str(exc),
                "paths": [[str(key) for key in path] for path in exc.paths],
                "status_code": 400,
            },
        )

    async def misconfiguration_handler(request, exc: Exception):
        log.error("Composite misconfigured on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=500,
            content={"error": True, "message": str(exc), "status_code": 500},
        )

    for error in (ConfigurationError, BindingError, DependencyError):
        app.add_exception_handler(error, misconfiguration_handler)
