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

"""Exception hierarchy for configurability.

This module defines a custom exception hierarchy that allows library users
to distinguish between the different ways configuration can go wrong:

- LoadError: A configuration source could not be read or parsed
- TypeMismatch: A path was traversed through a node that is not a map
- DispatchError: A component's configuration hook raised
- InvalidSectionKey: An explicit section key is not a valid identifier

All exceptions inherit from ConfigurabilityError, allowing users to catch
every library error with a single except clause if needed.

Example:
    Catching specific error types:
        ```python
        from configurability import ConfigDocument, configure_all
        from configurability.exceptions import DispatchError, LoadError

        try:
            config = ConfigDocument.load(Path("config.yml"))
            configure_all(config)
        except LoadError as e:
            print(f"Could not load config: {e}")
        except DispatchError as e:
            print(f"{e.key!r} section rejected by {e.component!r}: {e}")
        ```

Note:
    A component without a usable name is not an error. Its section key
    degrades to "anonymous".
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "ConfigurabilityError",
    "LoadError",
    "TypeMismatch",
    "DispatchError",
    "InvalidSectionKey",
]


class ConfigurabilityError(Exception):
    """Base exception for all configurability errors."""

    pass


class LoadError(ConfigurabilityError):
    """Raised when a configuration source is unreadable or unparseable.

    This exception is raised by ConfigDocument.load(), reload() and
    from_text() when:

    - The file does not exist or cannot be read
    - The text is not valid YAML
    - The top level of the document is not a mapping
    - reload() is called on a document that has no path

    The underlying exception is always chained as __cause__.
    """

    pass


class TypeMismatch(ConfigurabilityError, TypeError):
    """Raised when traversing or setting through a non-map node.

    For example, digging into ``database.port.number`` when ``port`` is
    an integer, or asking a sequence node for an attribute.
    """

    pass


class DispatchError(ConfigurabilityError):
    """Raised when a component's configuration hook fails.

    Dispatch stops at the first failing component. Components configured
    before the failure keep the section they received.

    Attributes:
        component: The component whose hook raised.
        key: The section key that was being delivered.
    """

    def __init__(self, message: str, component: Any = None, key: str | None = None):
        super().__init__(message)
        self.component = component
        self.key = key


class InvalidSectionKey(ConfigurabilityError, ValueError):
    """Raised when an explicit section key is not a valid identifier.

    Section keys must be non-empty and contain only ASCII letters, digits
    and underscores.
    """

    pass
