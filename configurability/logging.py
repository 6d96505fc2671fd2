# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Logging interface for configurability.

Library modules report what they are doing through a small logger
protocol instead of configuring the standard logging module. The logger
can be set globally or passed to individual calls for better isolation.

The logger supports two output levels:
- Verbose: Loading, writing and registration events
- Debug: Per-component dispatch details (implies verbose)

Prefixes used by the library:
- CONFIG: Document load, reload and write
- REGISTRY: Registration, unregistration and pruning
- DISPATCH: Delivery of a section to a single component

Example:
    Configure global logger:
        ```python
        from configurability.logging import get_logger, set_global_logger

        set_global_logger(get_logger(verbose=True))
        ```

    Pass a logger to a single call:
        ```python
        config = ConfigDocument.load(path, logger=get_logger(debug=True))
        ```

Note:
    The default logger is silent, so the library prints nothing unless
    an application opts in.
"""

from __future__ import annotations

from typing import Protocol


class Logger(Protocol):
    """Protocol for logger implementations."""

    def verbose(self, prefix: str, message: str) -> None:
        """Print a verbose log message.

        Args:
            prefix: Message prefix (e.g., "CONFIG", "REGISTRY").
            message: Log message.
        """
        ...

    def debug(self, prefix: str, message: str) -> None:
        """Print a debug log message.

        Args:
            prefix: Message prefix (e.g., "DISPATCH").
            message: Log message.
        """
        ...


class DefaultLogger:
    """Logger that prints ``[PREFIX] message`` lines to stdout."""

    def __init__(self, verbose: bool = False, debug: bool = False) -> None:
        """Initialize logger with verbosity settings.

        Args:
            verbose: If True, print verbose messages.
            debug: If True, print debug messages (implies verbose).
        """
        self._verbose = verbose or debug
        self._debug = debug

    def verbose(self, prefix: str, message: str) -> None:
        """Print a verbose log message (only when verbose mode is active)."""
        if self._verbose:
            print(f"[{prefix}] {message}")

    def debug(self, prefix: str, message: str) -> None:
        """Print a debug log message (only when debug mode is active)."""
        if self._debug:
            print(f"[{prefix}] {message}")


class SilentLogger:
    """Logger that suppresses all output."""

    def verbose(self, prefix: str, message: str) -> None:
        pass

    def debug(self, prefix: str, message: str) -> None:
        pass


_global_logger: Logger = SilentLogger()


def get_logger(verbose: bool = False, debug: bool = False) -> Logger:
    """Get a logger instance with specified verbosity.

    Args:
        verbose: If True, logger will print verbose messages.
        debug: If True, logger will print debug messages (implies verbose).

    Returns:
        A logger instance configured with the specified verbosity.
    """
    return DefaultLogger(verbose=verbose, debug=debug)


def get_global_logger() -> Logger:
    """Get the global logger instance (silent unless configured)."""
    return _global_logger


def set_global_logger(logger: Logger) -> None:
    """Set the global logger instance.

    Args:
        logger: Logger instance used by every library call that is not
            given an explicit ``logger=`` argument.
    """
    global _global_logger
    _global_logger = logger
