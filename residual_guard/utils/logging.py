"""
Minimal logging infrastructure for the residual_guard package.

Every logger handed out here lives under the ``residual_guard`` root so a
solver embedding this package can silence or redirect all evaluation
diagnostics with a single ``logging.getLogger("residual_guard")`` call.
"""

import functools
import inspect
import logging
from typing import Optional

ROOT_LOGGER_NAME = "residual_guard"


class MinimalLogger:
    """Simplified logger manager for the residual_guard package."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._configured = False
        self._root_logger_name = ROOT_LOGGER_NAME
        self._initialized = True

    def configure(self, level: str = "INFO", force: bool = False):
        """Configure basic logging."""
        if self._configured and not force:
            return

        root_logger = logging.getLogger(self._root_logger_name)
        root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

        # Add console handler if none exists
        if not root_logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
            )
            handler.setFormatter(formatter)
            root_logger.addHandler(handler)

        self._configured = True

    def get_logger(self, name: str) -> logging.Logger:
        """Get or create a logger with hierarchical naming."""
        if name.startswith(self._root_logger_name):
            full_name = name
        elif name == "__main__":
            full_name = f"{self._root_logger_name}.main"
        else:
            full_name = f"{self._root_logger_name}.{name}"

        if not self._configured:
            self.configure()

        return logging.getLogger(full_name)


# Global logger manager instance
_logger_manager = MinimalLogger()


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance with automatic naming.

    Args:
        name: Logger name. If None, uses caller's module name.

    Returns:
        Configured logger instance.
    """
    if name is None:
        frame = inspect.currentframe()
        try:
            caller_frame = frame.f_back
            if caller_frame:
                name = caller_frame.f_globals.get("__name__", "unknown")
        finally:
            del frame

    return _logger_manager.get_logger(name or "unknown")


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Reconfigure the package root logger level.

    Args:
        level: Level name such as ``"DEBUG"`` or ``"WARNING"``.

    Returns:
        The package root logger.
    """
    _logger_manager.configure(level=level, force=True)
    return logging.getLogger(ROOT_LOGGER_NAME)


def log_calls(
    logger: Optional[logging.Logger] = None,
    level: int = logging.DEBUG,
    include_result: bool = False,
):
    """
    Decorator to log function calls.

    Args:
        logger: Logger to use. If None, creates one for the module.
        level: Logging level to use.
        include_result: Whether to log function return value.
    """

    def decorator(func):
        nonlocal logger
        if logger is None:
            logger = get_logger(func.__module__)

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            func_name = f"{func.__module__}.{func.__qualname__}"

            logger.log(level, f"Calling {func_name}")

            try:
                result = func(*args, **kwargs)

                if include_result:
                    logger.log(level, f"Completed {func_name} -> {repr(result)}")
                else:
                    logger.log(level, f"Completed {func_name}")

                return result

            except Exception as e:
                logger.log(logging.ERROR, f"Exception in {func_name}: {e}")
                raise

        return wrapper

    return decorator


# Configure default logging on import
_logger_manager.configure()
