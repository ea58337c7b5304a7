"""This provides logging functionality for gridworld.

It is built on the standard library logging module. Every module obtains its
logger through ``create_module_logger`` so that all records live below a single
``GRIDWORLD`` root logger. Nothing is configured on import; use
``log_to_stderr`` for quick interactive inspection.

"""

import inspect
import logging
from functools import wraps
from logging import DEBUG, INFO

__all__ = [
    "DEBUG",
    "INFO",
    "create_module_logger",
    "function_logger",
    "get_rootlogger",
    "log_to_stderr",
    "method_logger",
]
LOGGER_NAME = "GRIDWORLD"
DEFAULT_FORMAT = "%(levelname)s GRIDWORLD %(name)s %(message)s"


def create_module_logger(name: str | None = None):
    """Create a module logger.

    Args:
        name: name of the module for which the logger is created, defaults to the calling module

    """
    if name is None:
        frame = inspect.currentframe()
        name = frame.f_back.f_globals["__name__"]
    logger = logging.getLogger(f"{LOGGER_NAME}.{name}")
    return logger


def get_module_logger(name: str):
    """Helper function for getting the module logger."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def method_logger(modulename: str):
    """Decorator for adding debug logging to a method.

    Args:
        modulename: The name of the module in which the method occurs.

    """
    logger = get_module_logger(modulename)

    def log_method(meth):
        @wraps(meth)
        def wrapper(self, *args, **kwargs):
            classname = self.__class__.__name__
            logger.debug(
                f"calling {classname}.{meth.__name__} with {args} and {kwargs}"
            )
            return meth(self, *args, **kwargs)

        return wrapper

    return log_method


def function_logger(modulename: str):
    """Decorator for adding debug logging to a function.

    Args:
        modulename: The name of the module in which the function occurs.

    """
    logger = get_module_logger(modulename)

    def log_function(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            logger.debug(f"calling {func.__name__} with {args} and {kwargs}")
            return func(*args, **kwargs)

        return wrapper

    return log_function


def get_rootlogger():
    """Return the gridworld root logger."""
    return logging.getLogger(LOGGER_NAME)


def log_to_stderr(level=DEBUG, pass_through: bool = True):
    """Log gridworld messages to stderr.

    Args:
        level: the logging level to use
        pass_through: if False, records are not propagated to the root logger

    """
    logger = get_rootlogger()
    logger.setLevel(level)
    logger.propagate = pass_through

    if not any(getattr(h, "_gridworld_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        handler._gridworld_handler = True
        logger.addHandler(handler)

    return logger
