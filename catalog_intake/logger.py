"""
Central logging configuration and debug decorator.

Provides console + file logging for the intake pipeline, plus a decorator
for function-level observability of the orchestrator entry points.
"""

import functools
import logging
import os
import reprlib
import traceback
from pathlib import Path
from time import time
from typing import Any, Callable, TypeVar

# Type variable for function return types
F = TypeVar("F", bound=Callable[..., Any])

# Log file path (override with CATALOG_INTAKE_LOG_FILE)
LOG_FILE = Path(
    os.environ.get(
        "CATALOG_INTAKE_LOG_FILE",
        Path(os.environ.get("CATALOG_INTAKE_HOME") or Path.cwd()) / "intake_debug.log",
    )
)

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(module)s]: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Configure package logger
_logger = logging.getLogger("catalog_intake")
_logger.setLevel(logging.DEBUG)

# Prevent duplicate handlers
if not _logger.handlers:
    # Console handler (INFO level)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    _logger.addHandler(console_handler)

    # File handler (DEBUG level)
    try:
        LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(LOG_FILE, mode="a", encoding="utf-8")
    except OSError as exc:
        _logger.warning(f"File logging disabled, cannot open {LOG_FILE}: {exc}")
    else:
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        _logger.addHandler(file_handler)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Optional module name. If None, returns the package logger.

    Returns:
        Logger instance that propagates to the package handlers.
    """
    if not name:
        return _logger
    if name == "catalog_intake" or name.startswith("catalog_intake."):
        return logging.getLogger(name)
    return logging.getLogger(f"catalog_intake.{name}")


def debug_watcher(func: F) -> F:
    """
    Decorator that logs function entry, execution time, and exceptions.

    Logs:
    - Function start with (truncated) arguments
    - Function completion with execution time
    - Full traceback on exceptions (to file only)

    Args:
        func: Function to wrap.

    Returns:
        Wrapped function with logging.
    """
    logger = get_logger(func.__module__)

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        func_name = func.__name__
        start_time = time()

        # Log function entry with bounded argument reprs
        if logger.isEnabledFor(logging.DEBUG):
            args_str = ", ".join([reprlib.repr(arg) for arg in args[:2]])
            kwargs_str = ", ".join([f"{k}={reprlib.repr(v)}" for k, v in list(kwargs.items())[:3]])
            params_str = ", ".join(filter(None, [args_str, kwargs_str]))
            logger.debug(f"Starting {func_name}... ({params_str})")

        try:
            result = func(*args, **kwargs)

            elapsed = time() - start_time
            logger.info(f"Completed {func_name} in {elapsed:.3f} seconds.")

            return result

        except Exception as e:
            elapsed = time() - start_time
            error_msg = f"Exception in {func_name} after {elapsed:.3f} seconds: {type(e).__name__}: {str(e)}"
            logger.error(error_msg)
            logger.debug(f"Full traceback for {func_name}:\n{traceback.format_exc()}")

            # Re-raise to maintain normal error handling
            raise

    return wrapper  # type: ignore[return-value]
