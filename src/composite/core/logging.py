# src/composite/core/logging.py
"""Logging for composite, rendered through rich when enabled."""

import logging
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

log = logging.getLogger("composite")
log.addHandler(logging.NullHandler())


def setup_logging(level: Union[int, str] = logging.INFO, console: Optional[Console] = None) -> logging.Logger:
    """
    Attach a rich handler to the composite logger.

    Calling it again replaces the previous rich handler instead of stacking them.
    """
    from composite.ui import console as default_console

    for handler in list(log.handlers):
        if isinstance(handler, RichHandler):
            log.removeHandler(handler)

    handler = RichHandler(console=console if console is not None else default_console, show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    log.addHandler(handler)
    log.setLevel(level)
    return log
