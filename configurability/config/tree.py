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

"""Attribute-style and map-style access over parsed configuration.

A parsed YAML document is a tree of dicts, lists and scalars. ConfigTree
wraps a dict and ConfigList wraps a list so that the same data can be
read and written either way:

    config.database.testing.adapter = "mysql"
    config["database"]["testing"]["adapter"]   # "mysql"

Child nodes are wrapped on access and share the backing containers of
their parent, so writes made through a child land in the one tree owned
by the document. Leaves come back as plain scalars. The backing
containers themselves are never handed out: values assigned into the tree
are copied in, and to_dict()/to_list() return copies.

Missing keys read as None instead of raising, which keeps lenient reads
like ``section.get("host") or "localhost"`` and ``section.port or 389``
short. Traversing *through* a scalar with dig() or set_path() raises
TypeMismatch. Plain chained access hands back the scalar itself, so
``config.ldap.host.x`` or ``config["ldap"]["host"]["x"] = 1`` fail with
Python's own AttributeError/TypeError; use dig()/set_path() when the
shape of the document is not known in advance.

Every mutation marks the shared tree state dirty; ConfigDocument reports
it through its ``dirty`` property.

Note:
    Attribute access only reaches keys that are valid Python identifiers,
    do not start with an underscore, and are not shadowed by a method
    (``keys``, ``items``, ``get``...). Map-style access reaches any key.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import Any

from configurability.exceptions import TypeMismatch


class _TreeState:
    """Mutable state shared by every wrapper over one tree."""

    __slots__ = ("dirty",)

    def __init__(self) -> None:
        self.dirty = False


def _unwrap(value: Any) -> Any:
    """Copy a value into plain dicts/lists suitable for storage."""
    if isinstance(value, ConfigTree):
        return _unwrap(value._data)
    if isinstance(value, ConfigList):
        return _unwrap(value._data)
    if isinstance(value, Mapping):
        return {k: _unwrap(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_unwrap(v) for v in value]
    return value


def _wrap(value: Any, state: _TreeState) -> Any:
    if isinstance(value, dict):
        return ConfigTree(value, _state=state)
    if isinstance(value, list):
        return ConfigList(value, _state=state)
    return value


def _node_type(value: Any) -> str:
    if isinstance(value, list):
        return "sequence"
    return type(value).__name__


class ConfigTree:
    """Map node of a configuration tree.

    Args:
        data: Initial mapping. It is copied, so later changes to the
            argument do not reach the tree.

    Raises:
        TypeMismatch: If ``data`` is not a mapping.

    Example:
        Both access styles share storage:
            ```python
            tree = ConfigTree({"ldap": {"host": "ldap.acme.com"}})
            tree.ldap.port = 389
            tree["ldap"]["port"]   # 389
            tree.ldap.bind_dn      # None
            ```
    """

    __slots__ = ("_data", "_state")

    def __init__(
        self, data: Mapping[str, Any] | None = None, *, _state: _TreeState | None = None
    ) -> None:
        if data is None:
            data = {}
        if not isinstance(data, (Mapping, ConfigTree)):
            raise TypeMismatch(
                f"ConfigTree needs a mapping, got {type(data).__name__}"
            )
        if _state is None:
            # Top-level construction: take a private copy
            data = _unwrap(data)
            _state = _TreeState()
        object.__setattr__(self, "_data", data)
        object.__setattr__(self, "_state", _state)

    # -------------------------------
    # Map-style access
    # -------------------------------

    def __getitem__(self, key: Any) -> Any:
        if key not in self._data:
            return None
        return _wrap(self._data[key], self._state)

    def __setitem__(self, key: Any, value: Any) -> None:
        self._data[key] = _unwrap(value)
        self._state.dirty = True

    def __delitem__(self, key: Any) -> None:
        del self._data[key]
        self._state.dirty = True

    def __contains__(self, key: Any) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._data))

    def __len__(self) -> int:
        return len(self._data)

    def get(self, key: Any, default: Any = None) -> Any:
        """Return the wrapped value for ``key``, or ``default`` if absent."""
        if key not in self._data:
            return default
        return self[key]

    def keys(self) -> list[Any]:
        return list(self._data)

    def values(self) -> list[Any]:
        return [self[k] for k in self._data]

    def items(self) -> list[tuple[Any, Any]]:
        return [(k, self[k]) for k in self._data]

    # -------------------------------
    # Attribute-style access
    # -------------------------------

    def __getattr__(self, name: str) -> Any:
        # Only called for names that are not real attributes
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return
        self[name] = value

    def __delattr__(self, name: str) -> None:
        if name.startswith("_"):
            object.__delattr__(self, name)
            return
        if name not in self._data:
            raise AttributeError(name)
        del self[name]

    # -------------------------------
    # Path access
    # -------------------------------

    def dig(self, *keys: Any) -> Any:
        """Read a nested value by a path of keys.

        Integer keys index into sequences. A missing key or a null value
        along the way ends the walk with None.

        Raises:
            TypeMismatch: If the path goes through a scalar, or uses a
                non-integer key on a sequence.

        Example:
            ```python
            config.dig("database", "testing", "adapter")   # "sqlite3"
            config.dig("database", "staging", "adapter")   # None
            ```
        """
        node: Any = self._data
        walked: list[str] = []
        for key in keys:
            if node is None:
                return None
            if isinstance(node, dict):
                node = node.get(key)
            elif isinstance(node, list):
                if not isinstance(key, int) or isinstance(key, bool):
                    raise TypeMismatch(
                        f"Cannot look up {key!r} in sequence at {_dotted(walked)}"
                    )
                try:
                    node = node[key]
                except IndexError:
                    return None
            else:
                raise TypeMismatch(
                    f"Cannot look up {key!r} through {_node_type(node)} "
                    f"at {_dotted(walked)}"
                )
            walked.append(str(key))
        return _wrap(node, self._state)

    def set_path(self, path: str | Sequence[Any], value: Any) -> None:
        """Set a nested value, creating missing intermediate maps.

        Args:
            path: Dotted string ("database.testing.adapter") or a sequence
                of keys.
            value: Value to store (copied in).

        Raises:
            TypeMismatch: If an existing intermediate node is not a map.
            ValueError: If the path is empty.
        """
        keys = path.split(".") if isinstance(path, str) else list(path)
        if not keys:
            raise ValueError("set_path() needs at least one key")

        node = self._data
        walked: list[str] = []
        for key in keys[:-1]:
            child = node.get(key)
            if child is None:
                child = node[key] = {}
            elif not isinstance(child, dict):
                raise TypeMismatch(
                    f"Cannot set {_dotted(keys)}: {_dotted(walked + [str(key)])} "
                    f"is a {_node_type(child)}, not a map"
                )
            node = child
            walked.append(str(key))

        node[keys[-1]] = _unwrap(value)
        self._state.dirty = True

    # -------------------------------
    # Conversion
    # -------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Return a deep copy of the tree as plain dicts and lists."""
        return _unwrap(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ConfigTree):
            return self._data == other._data
        if isinstance(other, Mapping):
            return self._data == _unwrap(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ConfigTree({self._data!r})"


class ConfigList:
    """Sequence node of a configuration tree.

    Supports indexing, iteration and appending. Children that are maps or
    sequences come back wrapped and share storage with the tree.

    Raises:
        TypeMismatch: On attribute-style member access, which only maps
            support.
    """

    __slots__ = ("_data", "_state")

    def __init__(
        self, data: Iterable[Any] | None = None, *, _state: _TreeState | None = None
    ) -> None:
        if data is None:
            data = []
        if _state is None:
            data = _unwrap(list(data))
            _state = _TreeState()
        object.__setattr__(self, "_data", data)
        object.__setattr__(self, "_state", _state)

    def _check_index(self, index: Any) -> None:
        if isinstance(index, str):
            raise TypeMismatch(f"Sequence nodes have no key {index!r}")

    def __getitem__(self, index: int | slice) -> Any:
        self._check_index(index)
        if isinstance(index, slice):
            return [_wrap(v, self._state) for v in self._data[index]]
        return _wrap(self._data[index], self._state)

    def __setitem__(self, index: int, value: Any) -> None:
        self._check_index(index)
        self._data[index] = _unwrap(value)
        self._state.dirty = True

    def __delitem__(self, index: int) -> None:
        self._check_index(index)
        del self._data[index]
        self._state.dirty = True

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[Any]:
        return (_wrap(v, self._state) for v in list(self._data))

    def __contains__(self, value: Any) -> bool:
        return _unwrap(value) in self._data

    def append(self, value: Any) -> None:
        self._data.append(_unwrap(value))
        self._state.dirty = True

    def to_list(self) -> list[Any]:
        """Return a deep copy of the sequence as plain lists and dicts."""
        return _unwrap(self._data)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        raise TypeMismatch(f"Sequence nodes have no member {name!r}")

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return
        raise TypeMismatch(f"Cannot set {name!r} on a sequence node")

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ConfigList):
            return self._data == other._data
        if isinstance(other, (list, tuple)):
            return self._data == _unwrap(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ConfigList({self._data!r})"


def _dotted(keys: Iterable[Any]) -> str:
    return ".".join(str(k) for k in keys) or "<root>"
