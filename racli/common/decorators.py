"""Command decorators shared by the CLI.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import TYPE_CHECKING, Any

import click

if TYPE_CHECKING:
    from collections.abc import Callable

from racli.common.exceptions import RegistryAccordError

logger = logging.getLogger(__name__)


def exit_on_error(func: Callable) -> Callable:
    """Turn classified errors into a stderr message and their exit code.

    The message includes the correlation id when the error has one.

    Args:
        func: click command callback

    Returns:
        Decorated callback
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except RegistryAccordError as e:
            logger.debug("Command failed with %s (%s)", e.code, type(e).__name__)
            click.echo(f"Error: {e}", err=True)
            raise click.exceptions.Exit(e.exit_code) from e

    return wrapper
