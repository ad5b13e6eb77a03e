from __future__ import annotations
import logging
from functools import wraps
from typing import Any, Callable

from rich.logging import RichHandler


def _summarize(value: Any) -> str:
    # Trees can hold thousands of nodes; log their shape, not their content
    nodes = getattr(value, "nodes", None)
    if isinstance(nodes, dict) and hasattr(value, "root_id"):
        return f"<{type(value).__name__} root={value.root_id!r} nodes={len(nodes)}>"
    return repr(value)


def log_calls(logger_name: str | None = None) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator logging calls and results at DEBUG level, and tree errors at INFO before re-raising."""

    def _decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        name = logger_name or func.__module__
        logger = logging.getLogger(name)

        @wraps(func)
        def _wrapper(*args: Any, **kwargs: Any) -> Any:
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "Calling %s args=[%s] kwargs={%s}",
                    func.__name__,
                    ", ".join(_summarize(a) for a in args),
                    ", ".join(f"{k}={_summarize(v)}" for k, v in kwargs.items()),
                )
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.info("%s failed: %s", func.__name__, e)
                raise
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("%s returned %s", func.__name__, _summarize(result))
            return result

        return _wrapper

    return _decorator


def configure_logging(verbose: bool = False) -> None:
    """Route ``treedecision`` logs through rich; DEBUG when verbose, WARNING otherwise."""
    logger = logging.getLogger("treedecision")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(show_path=False, markup=False))
