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

"""Public API return types for configurability.

All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Example:
    Inspecting a dispatch:
        ```python
        from configurability import configure_all

        result = configure_all(config)
        print(result.keys)     # ("database", "ldap", "branding")
        print(result.pruned)   # 0
        ```
"""

from __future__ import annotations

from dataclasses import dataclass

from configurability.keys import SectionKey


@dataclass(frozen=True)
class DispatchResult:
    """Result from dispatching a document to registered components.

    Attributes:
        keys: Section key delivered to each configured component, in the
            order the components were configured. Keys repeat when
            components share a section.
        pruned: Number of dead registry entries removed before dispatch.
    """

    keys: tuple[SectionKey, ...]
    pruned: int

    @property
    def count(self) -> int:
        """Number of components configured."""
        return len(self.keys)
