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

"""Section key derivation for configurability.

Every registered component receives the section of the configuration
document stored under its section key. Components rarely name that key
themselves; it is derived from whatever identity they have.

Resolution order:
  1. Explicit override: a ``config_key`` attribute (used verbatim)
  2. An instance ``name`` attribute, when it is a non-empty string
  3. The class ``__name__``
  4. The literal "anonymous"

Derived names are then normalized: namespace prefixes ("Acme::") are
stripped, the text is lower-cased, runs of non-word characters become a
single underscore, and leading/trailing underscores are trimmed.

Example:
    Deriving keys:
        ```python
        from configurability.keys import derive_key

        derive_key("Acme::User")        # "user"
        derive_key("J. Random Hacker")  # "j_random_hacker"

        class LDAPAdapter:
            pass

        derive_key(LDAPAdapter)         # "ldapadapter"
        ```

Note:
    Two components that derive the same key share a section. That is
    deliberate; nothing enforces uniqueness on the component side.
"""

from __future__ import annotations

import re
from typing import Any

from configurability.exceptions import InvalidSectionKey

ANONYMOUS_KEY = "anonymous"

_VALID_KEY = re.compile(r"[A-Za-z0-9_]+")
_NON_WORD = re.compile(r"\W+", re.ASCII)
_NAMESPACE = re.compile(r".*::")


class SectionKey(str):
    """A validated, immutable section key.

    Only non-empty strings of ASCII letters, digits and underscores are
    accepted. Case is preserved; derived keys are already lower-case.

    Raises:
        InvalidSectionKey: If the value breaks the identifier rules.
    """

    __slots__ = ()

    def __new__(cls, value: str) -> SectionKey:
        if isinstance(value, SectionKey):
            return value
        if not isinstance(value, str) or not _VALID_KEY.fullmatch(value):
            raise InvalidSectionKey(
                f"Invalid section key {value!r}: expected ASCII letters, "
                "digits and underscores"
            )
        return super().__new__(cls, value)

    def __repr__(self) -> str:
        return f"SectionKey({str(self)!r})"


def normalize_name(name: str) -> str:
    """Turn a display name into a section key candidate.

    Returns:
        The normalized name, or "anonymous" if nothing usable is left.
    """
    name = _NAMESPACE.sub("", name)
    name = _NON_WORD.sub("_", name.lower()).strip("_")
    return name or ANONYMOUS_KEY


def _display_name(source: Any) -> str:
    """Pick the name a component goes by (step 2 of resolution)."""
    if isinstance(source, str):
        return source
    if isinstance(source, type):
        return getattr(source, "__name__", "") or ""

    name = getattr(source, "name", None)
    if isinstance(name, str) and name:
        return name
    return type(source).__name__ or ""


def derive_key(source: Any) -> SectionKey:
    """Derive the section key for a name, a class or a component.

    Args:
        source: A name string, a class, or any component instance. Non-string
            sources with a non-None ``config_key`` attribute use that value
            verbatim.

    Returns:
        The section key. Deriving from a derived key gives the same key.

    Raises:
        InvalidSectionKey: If an explicit ``config_key`` is not a valid
            identifier.
    """
    if not isinstance(source, str):
        override = getattr(source, "config_key", None)
        if override is not None:
            return SectionKey(override)

    return SectionKey(normalize_name(_display_name(source)))


def resolve_key(component: Any, explicit: str | None = None) -> SectionKey:
    """Resolve the key for a registered component.

    A key given at registration time wins over everything the component
    says about itself. Otherwise the key is derived fresh, so a component
    whose name changes after registration is configured under the new name.
    """
    if explicit is not None:
        return SectionKey(explicit)
    return derive_key(component)
