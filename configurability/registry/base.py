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

"""Registry of configurable components for configurability.

Components opt in by registering. The registry holds them through weak
references only, so registering never keeps a component alive; entries
whose component has been garbage-collected are pruned on the next
dispatch without error.

Design Philosophy:
    - Components are duck-typed: anything with a ``configure(section)``
      hook works, and anything weak-referenceable without one gets its
      section stored as ``config``
    - Section keys are derived at every dispatch unless given explicitly,
      so a component's name may change after it registers
    - A process-wide registry serves the module-level functions; pass an
      explicit Registry where isolation matters (tests, embedded use)
    - Dispatch is fail-fast: the first failing hook aborts the walk

Example:
    Registering components:
        ```python
        from configurability import Configurable, register_configurable

        class LDAPAdapter(Configurable):
            config_key = "ldap"

            def configure(self, section):
                super().configure(section)
                self.host = section.host if section else "localhost"

        adapter = LDAPAdapter()
        register_configurable(adapter)
        ```

    Dispatching a document:
        ```python
        from configurability import ConfigDocument, configure_all

        configure_all(ConfigDocument.load(Path("config.yml")))
        adapter.host   # "ldap.acme.com"
        ```

Note:
    Register/unregister/dispatch/prune/reset take one re-entrant lock, so
    hooks may register further components while being configured.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import threading
from typing import TYPE_CHECKING, Any, ClassVar, Protocol
import weakref

from configurability.config.tree import ConfigTree
from configurability.keys import SectionKey, resolve_key
from configurability.logging import Logger, get_global_logger
from configurability.registry.dispatch import configure_component, section_for
from configurability.results import DispatchResult

if TYPE_CHECKING:
    from configurability.config.document import ConfigDocument

# -------------------------------
# Component capability
# -------------------------------


class ConfigurableComponent(Protocol):
    """Protocol for components that take their section through a hook.

    Implementing it is optional; see Configurable for a ready-made mixin.
    """

    def configure(self, section: Any) -> None:
        """Receive the component's section (None if the document has none)."""
        ...


class Configurable:
    """Mixin giving a component the default configuration behavior.

    Attributes:
        config_key: Explicit section key. None derives the key from the
            component's ``name`` or class name.
        config_defaults: Default section contents, collected by
            Registry.gather_defaults().
        config: The last section received.
    """

    config_key: ClassVar[str | None] = None
    config_defaults: ClassVar[Mapping[str, Any] | None] = None
    config: Any = None

    def configure(self, section: Any) -> None:
        """Store the section as ``self.config``. Override to do more."""
        self.config = section


# -------------------------------
# Registry
# -------------------------------


@dataclass(eq=False)
class RegistryEntry:
    """A registered component and the key it was registered with.

    Attributes:
        ref: Weak reference to the component.
        key: Explicit section key, or None to derive one at dispatch time.
        configured: Whether the component has received a section since it
            registered (or since the last reset).
    """

    ref: weakref.ref
    key: SectionKey | None = None
    configured: bool = False

    @property
    def component(self) -> Any:
        """The component, or None once it has been garbage-collected."""
        return self.ref()


class Registry:
    """A set of components waiting for configuration.

    Args:
        logger: Logger for REGISTRY and DISPATCH messages. Defaults to the
            global logger.
    """

    def __init__(self, logger: Logger | None = None) -> None:
        self._entries: list[RegistryEntry] = []
        self._lock = threading.RLock()
        self._logger = logger
        self._installed: ConfigDocument | None = None

    @property
    def _log(self) -> Logger:
        return self._logger or get_global_logger()

    @property
    def installed(self) -> ConfigDocument | None:
        """The document most recently dispatched, or None."""
        return self._installed

    def _find(self, component: Any) -> RegistryEntry | None:
        for entry in self._entries:
            if entry.ref() is component:
                return entry
        return None

    # -------------------------------
    # Membership
    # -------------------------------

    def register(self, component: Any, key: str | None = None) -> None:
        """Register a component for configuration.

        Registering the same component again replaces its explicit key.
        If a document has already been dispatched through this registry,
        the component is configured from it straight away.

        Args:
            component: Any weak-referenceable object or class.
            key: Explicit section key, used verbatim. None derives the key
                at every dispatch.

        Raises:
            TypeError: If the component cannot be weakly referenced
                (e.g., str, int, dict or a class using __slots__ without
                __weakref__).
            InvalidSectionKey: If ``key`` is not a valid identifier.
            DispatchError: If configuring from the installed document fails.
        """
        explicit = SectionKey(key) if key is not None else None
        try:
            ref = weakref.ref(component)
        except TypeError as err:
            raise TypeError(
                f"Cannot register {type(component).__name__} object: "
                "it does not support weak references"
            ) from err

        with self._lock:
            entry = self._find(component)
            if entry is None:
                entry = RegistryEntry(ref, explicit)
                self._entries.append(entry)
            else:
                entry.key = explicit
            self._log.verbose(
                "REGISTRY",
                f"Registered {component!r} (key: {explicit or 'derived'})",
            )
            if self._installed is not None:
                self._configure_entry(entry, component, self._installed)

    def unregister(self, component: Any) -> bool:
        """Remove a component.

        Returns:
            True if the component was registered, False otherwise.
        """
        with self._lock:
            entry = self._find(component)
            if entry is None:
                return False
            self._entries.remove(entry)
            self._log.verbose("REGISTRY", f"Unregistered {component!r}")
            return True

    def prune(self) -> int:
        """Drop entries whose component no longer exists.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            live = [e for e in self._entries if e.ref() is not None]
            pruned = len(self._entries) - len(live)
            self._entries = live
            if pruned:
                self._log.verbose("REGISTRY", f"Pruned {pruned} dead component(s)")
            return pruned

    def components(self) -> list[Any]:
        """Return the live registered components."""
        with self._lock:
            return [c for c in (e.ref() for e in self._entries) if c is not None]

    def is_registered(self, component: Any) -> bool:
        with self._lock:
            return self._find(component) is not None

    def is_configured(self, component: Any) -> bool:
        """True if the component is registered and has received a section."""
        with self._lock:
            entry = self._find(component)
            return entry is not None and entry.configured

    def __contains__(self, component: Any) -> bool:
        return self.is_registered(component)

    def __len__(self) -> int:
        """Number of entries, including dead ones not yet pruned."""
        return len(self._entries)

    # -------------------------------
    # Dispatch
    # -------------------------------

    def _configure_entry(
        self, entry: RegistryEntry, component: Any, document: ConfigDocument
    ) -> SectionKey:
        key = resolve_key(component, entry.key)
        configure_component(component, key, section_for(document, key), self._log)
        entry.configured = True
        return key

    def dispatch(self, document: ConfigDocument) -> DispatchResult:
        """Configure every live component from ``document``.

        Each component receives ``document.root.get(key)``, which is None
        when the document has no such section. Dead entries are pruned
        first.

        Returns:
            Keys delivered and number of entries pruned.

        Raises:
            DispatchError: As soon as one component's hook fails. Components
                already configured keep their section; the rest are skipped.
        """
        with self._lock:
            self._installed = document
            pruned = self.prune()
            configured: list[SectionKey] = []
            for entry in list(self._entries):
                component = entry.ref()
                if component is None:
                    continue
                configured.append(self._configure_entry(entry, component, document))
            self._log.verbose(
                "REGISTRY", f"Configured {len(configured)} component(s)"
            )
            return DispatchResult(keys=tuple(configured), pruned=pruned)

    def reset(self) -> None:
        """Forget the installed document and deliver None to every component."""
        with self._lock:
            self._installed = None
            for entry in list(self._entries):
                component = entry.ref()
                if component is None:
                    continue
                configure_component(
                    component, resolve_key(component, entry.key), None, self._log
                )
                entry.configured = False

    def gather_defaults(self) -> dict[str, Any]:
        """Collect each live component's ``config_defaults`` under its key.

        The key is the one dispatch() delivers to: the registration key if
        one was given, otherwise the derived key.

        Components without defaults are skipped. When components share a
        key, later registrations win.
        """
        defaults: dict[str, Any] = {}
        with self._lock:
            for entry in list(self._entries):
                component = entry.ref()
                if component is None:
                    continue
                section = getattr(component, "config_defaults", None)
                if isinstance(section, Mapping):
                    key = resolve_key(component, entry.key)
                    defaults[str(key)] = ConfigTree(section).to_dict()
        return defaults


# -------------------------------
# Process-wide registry
# -------------------------------

_default_registry = Registry()


def get_registry() -> Registry:
    """Get the process-wide registry (empty at startup)."""
    return _default_registry


def set_registry(registry: Registry) -> None:
    """Replace the process-wide registry.

    Useful in tests to isolate registrations from each other.
    """
    global _default_registry
    _default_registry = registry


def _resolve(registry: Registry | None) -> Registry:
    # Registry defines __len__, so an empty one is falsy
    return registry if registry is not None else _default_registry


def register_configurable(
    component: Any, key: str | None = None, *, registry: Registry | None = None
) -> None:
    """Register a component with the process-wide (or given) registry."""
    _resolve(registry).register(component, key)


def unregister_configurable(
    component: Any, *, registry: Registry | None = None
) -> bool:
    """Unregister a component from the process-wide (or given) registry."""
    return _resolve(registry).unregister(component)


def configure_all(
    document: ConfigDocument, *, registry: Registry | None = None
) -> DispatchResult:
    """Dispatch ``document`` to every component in the registry.

    Raises:
        DispatchError: If a component's configuration hook fails.
    """
    return _resolve(registry).dispatch(document)


def reset_configuration(*, registry: Registry | None = None) -> None:
    """Reset the process-wide (or given) registry's components to None."""
    _resolve(registry).reset()
