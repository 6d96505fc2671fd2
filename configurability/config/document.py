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

"""Configuration documents: a tree plus where it came from.

ConfigDocument owns the root ConfigTree of one YAML document, the path it
was loaded from (if any) and the file modification time seen at the last
load or write. It can tell when the file on disk has moved on, reload
itself, and write itself back out.

Example:
    Load, inspect, install:
        ```python
        from pathlib import Path
        from configurability import ConfigDocument

        config = ConfigDocument.load(Path("config.yml"))
        config.database.testing.adapter       # "sqlite3"
        config["ldap"]["host"]                # "ldap.acme.com"
        config.install()                      # configure registered components
        ```

    Keep it fresh:
        ```python
        if config.changed():
            config.reload()                   # re-reads and re-installs
        ```

    Edit and save:
        ```python
        config.database.testing.adapter = "mysql"
        config.write()
        ```

Note:
    All wrappers obtained from a document share its single tree. Nothing
    is locked; concurrent mutation from several threads must be guarded
    by the caller.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from configurability.config.loader import (
    deep_merge_dicts,
    dump_yaml,
    fill_defaults,
    load_yaml_file,
    parse_yaml_text,
    write_yaml_file,
)
from configurability.config.tree import ConfigTree
from configurability.exceptions import ConfigurabilityError, LoadError
from configurability.logging import Logger, get_global_logger

if TYPE_CHECKING:
    from configurability.registry.base import Registry
    from configurability.results import DispatchResult


class ConfigDocument:
    """A configuration document with an optional backing file.

    Sections are reachable both as attributes and as items, delegated to
    the root tree:

        config.ldap.host == config["ldap"]["host"]

    Sections named like a document attribute or method (``defaults``,
    ``path``, ``root``, ``dirty``, ``sections``, ``get``, ``keys``...) are
    only reachable as items: ``config["defaults"]``. Assigning to such a
    name raises AttributeError instead of creating a section.

    Attributes:
        root: The root ConfigTree (always a map).
        path: File the document was loaded from or last written to, or None.
        mtime_ns: Modification time of ``path`` recorded at that moment.
        loaded_at: Wall-clock time of the last load or write.

    Args:
        data: Initial contents (copied). Defaults to an empty map.
        defaults: Values to merge underneath ``data``.
        registry: Registry used by install() and reload(). Defaults to the
            process-wide registry at the time of the call.
        logger: Logger for CONFIG messages. Defaults to the global logger.
    """

    def __init__(
        self,
        data: Mapping[str, Any] | None = None,
        *,
        defaults: Mapping[str, Any] | None = None,
        registry: Registry | None = None,
        logger: Logger | None = None,
    ) -> None:
        self._defaults = ConfigTree(defaults).to_dict() if defaults else {}
        self._registry = registry
        self._logger = logger
        self._path: Path | None = None
        self._mtime_ns: int | None = None
        self._loaded_at: datetime | None = None
        self._root = self._build_root(ConfigTree(data).to_dict())

    # -------------------------------
    # Construction
    # -------------------------------

    @classmethod
    def load(
        cls,
        path: Path | str,
        *,
        defaults: Mapping[str, Any] | None = None,
        registry: Registry | None = None,
        logger: Logger | None = None,
    ) -> ConfigDocument:
        """Load a document from a YAML file.

        Args:
            path: File to read.
            defaults: Values merged underneath the file contents (the file
                wins). Kept for later reloads.
            registry: Registry used by install() and reload().
            logger: Logger for CONFIG messages.

        Returns:
            The loaded document, with path and modification time recorded.

        Raises:
            LoadError: If the file is missing, unreadable, not valid YAML, or
                its top level is not a mapping.
        """
        doc = cls(defaults=defaults, registry=registry, logger=logger)
        doc._load_from(Path(path))
        return doc

    @classmethod
    def empty(cls, **kwargs: Any) -> ConfigDocument:
        """Create an empty in-memory document."""
        return cls(**kwargs)

    @classmethod
    def from_text(cls, text: str, **kwargs: Any) -> ConfigDocument:
        """Create an in-memory document from YAML text.

        Raises:
            LoadError: If the text is not valid YAML or not a mapping.
        """
        return cls(parse_yaml_text(text), **kwargs)

    @classmethod
    def from_defaults(
        cls, registry: Registry | None = None, **kwargs: Any
    ) -> ConfigDocument:
        """Create a document holding every registered component's defaults."""
        from configurability.registry.base import get_registry

        if registry is None:
            registry = get_registry()
        return cls(registry.gather_defaults(), registry=registry, **kwargs)

    def _build_root(self, data: dict[str, Any]) -> ConfigTree:
        if self._defaults:
            data = fill_defaults(data, self._defaults)
        return ConfigTree(data)

    def _load_from(self, path: Path) -> None:
        self._log.verbose("CONFIG", f"Loading config: {path}")
        data = load_yaml_file(path)
        try:
            mtime_ns = path.stat().st_mtime_ns
        except OSError as err:
            raise LoadError(f"Could not stat config file: {path}: {err}") from err

        self._root = self._build_root(data)
        self._record_source(path, mtime_ns)
        self._log.verbose(
            "CONFIG",
            f"Loaded {len(self._root)} section(s): {', '.join(map(str, self._root))}",
        )

    def _record_source(self, path: Path, mtime_ns: int) -> None:
        # Path and timestamp always change together
        self._path = path
        self._mtime_ns = mtime_ns
        self._loaded_at = datetime.now()
        self._root._state.dirty = False

    @property
    def _log(self) -> Logger:
        return self._logger or get_global_logger()

    # -------------------------------
    # Properties
    # -------------------------------

    @property
    def root(self) -> ConfigTree:
        return self._root

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def mtime_ns(self) -> int | None:
        return self._mtime_ns

    @property
    def loaded_at(self) -> datetime | None:
        return self._loaded_at

    @property
    def defaults(self) -> dict[str, Any]:
        """A copy of the defaults merged underneath the document."""
        return ConfigTree(self._defaults).to_dict()

    @property
    def dirty(self) -> bool:
        """True if the tree was modified since the last load or write."""
        return self._root._state.dirty

    # -------------------------------
    # Staleness
    # -------------------------------

    def changed_reason(self) -> str | None:
        """Explain why the backing file no longer matches the document.

        Returns:
            A human-readable reason, or None if the document is current or
            has no backing file.
        """
        if self._path is None:
            return None
        try:
            current = self._path.stat().st_mtime_ns
        except FileNotFoundError:
            return f"Config file has been removed: {self._path}"
        if current != self._mtime_ns:
            return f"Config file has been modified: {self._path}"
        return None

    def changed(self) -> bool:
        """True if the backing file's modification time differs from the
        one recorded at the last load or write."""
        return self.changed_reason() is not None

    # -------------------------------
    # Lifecycle
    # -------------------------------

    def reload(self) -> DispatchResult:
        """Re-read the backing file and re-install the document.

        The root tree is replaced wholesale; wrappers taken from the old
        root keep pointing at the old data. Installation happens even if
        the file did not change.

        Returns:
            The result of dispatching the reloaded document.

        Raises:
            LoadError: If the document has no path or the file cannot be
                loaded. The document is left unchanged in that case.
            DispatchError: If a component's configuration hook fails.
        """
        if self._path is None:
            raise LoadError("Cannot reload a config that was not loaded from a file")
        self._log.verbose("CONFIG", f"Reloading config: {self._path}")
        self._load_from(self._path)
        return self.install()

    def install(self, registry: Registry | None = None) -> DispatchResult:
        """Configure every registered component from this document.

        Args:
            registry: Registry to dispatch through. Defaults to the
                document's registry, then the process-wide one.

        Raises:
            DispatchError: If a component's configuration hook fails.
        """
        from configurability.registry.base import get_registry

        if registry is None:
            registry = self._registry if self._registry is not None else get_registry()
        return registry.dispatch(self)

    # -------------------------------
    # Serialization
    # -------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Return a deep copy of the document as plain dicts and lists."""
        return self._root.to_dict()

    def dump(self) -> str:
        """Serialize the document to YAML, keeping section order."""
        return dump_yaml(self._root.to_dict())

    def write(self, path: Path | str | None = None) -> Path:
        """Write the document to a file.

        The whole tree is written, including values that came from
        ``defaults``; they follow the loaded keys in each map.

        Args:
            path: Destination. Defaults to the document's own path. The
                document adopts the destination as its path.

        Returns:
            The path written to.

        Raises:
            ConfigurabilityError: If no path is given and the document has
                none.
        """
        target = Path(path) if path is not None else self._path
        if target is None:
            raise ConfigurabilityError("No path associated with this config")

        write_yaml_file(self.dump(), target)
        self._record_source(target, target.stat().st_mtime_ns)
        self._log.verbose("CONFIG", f"Wrote config: {target}")
        return target

    def merge(self, other: ConfigDocument | Mapping[str, Any]) -> ConfigDocument:
        """Return a new in-memory document with ``other`` deep-merged on top.

        Neither document is modified. The result keeps this document's
        defaults, registry and logger but has no path.
        """
        if isinstance(other, ConfigDocument):
            overlay = other.to_dict()
        else:
            overlay = ConfigTree(other).to_dict()
        merged = deep_merge_dicts(self.to_dict(), overlay)
        doc = type(self)(registry=self._registry, logger=self._logger)
        doc._defaults = self.defaults
        doc._root = ConfigTree(merged)
        return doc

    # -------------------------------
    # Section access
    # -------------------------------

    def __getitem__(self, key: Any) -> Any:
        return self._root[key]

    def __setitem__(self, key: Any, value: Any) -> None:
        self._root[key] = value

    def __delitem__(self, key: Any) -> None:
        del self._root[key]

    def __contains__(self, key: Any) -> bool:
        return key in self._root

    def __iter__(self) -> Iterator[Any]:
        return iter(self._root)

    def __len__(self) -> int:
        return len(self._root)

    def get(self, key: Any, default: Any = None) -> Any:
        return self._root.get(key, default)

    def sections(self) -> list[Any]:
        return self._root.keys()

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._root, name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return
        if hasattr(type(self), name):
            raise AttributeError(
                f"{name!r} is a ConfigDocument attribute; "
                f"use config[{name!r}] = ... to set a section with that name"
            )
        self._root[name] = value

    def __delattr__(self, name: str) -> None:
        if name.startswith("_"):
            object.__delattr__(self, name)
            return
        delattr(self._root, name)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ConfigDocument):
            return self._root == other._root
        if isinstance(other, Mapping):
            return self._root == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        source = str(self._path) if self._path else "<memory>"
        return f"<ConfigDocument {source} sections={self.sections()!r}>"
