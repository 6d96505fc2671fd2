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

"""Delivery of configuration sections to components.

A component takes its section through a ``configure(section)`` hook if it
has one. Components registered as classes need the hook to be a
classmethod. Without a usable hook the section is stored as the
component's ``config`` attribute.

Errors raised while delivering are wrapped in DispatchError and re-raised
at once; the caller decides whether anything else gets configured.
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, Callable

from configurability.exceptions import DispatchError
from configurability.keys import SectionKey
from configurability.logging import Logger

if TYPE_CHECKING:
    from configurability.config.document import ConfigDocument


def find_hook(component: Any) -> Callable[[Any], Any] | None:
    """Return the component's bound configure hook, if it has one."""
    hook = getattr(component, "configure", None)
    if not callable(hook):
        return None
    # A plain function looked up on a class is an unbound instance method
    if isinstance(component, type) and not inspect.ismethod(hook):
        return None
    return hook


def section_for(document: ConfigDocument, key: SectionKey) -> Any:
    """Look up ``key`` in the document; a missing section is None."""
    return document.root.get(key)


def configure_component(
    component: Any, key: SectionKey, section: Any, logger: Logger
) -> None:
    """Deliver one section to one component.

    Raises:
        DispatchError: If the hook (or storing the section) raises. The
            original exception is chained.
    """
    hook = find_hook(component)
    if section is None:
        logger.debug("DISPATCH", f"{key}: no section for {component!r}")
    else:
        logger.debug("DISPATCH", f"{key}: configuring {component!r}")

    try:
        if hook is None:
            component.config = section
        else:
            hook(section)
    except Exception as err:
        raise DispatchError(
            f"Failed to configure {component!r} with section {str(key)!r}: {err}",
            component=component,
            key=key,
        ) from err
