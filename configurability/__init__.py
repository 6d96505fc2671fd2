"""
configurability - per-component configuration sections from one YAML file

Components declare that they want a slice of a shared configuration
document; a loader hands each one its slice once the document is read.

configurability provides:
  - Section keys derived from component names or classes, or set explicitly
  - A weak-reference registry of components waiting for configuration
  - Attribute-style and map-style access over the same configuration tree
  - Reload, staleness checks and round-trip writing of YAML documents

Quick Start
-----------
Declare a component:

    from configurability import Configurable, register_configurable

    class Database(Configurable):
        def configure(self, section):
            super().configure(section)
            self.adapter = section.adapter if section else "sqlite3"

    db = Database()
    register_configurable(db)

Load and install a document:

    from configurability import ConfigDocument

    config = ConfigDocument.load("config.yml")
    config.install()
    db.adapter

Package Structure
-----------------
keys : module
    Section key derivation and validation.
config : package
    ConfigTree/ConfigList value trees and ConfigDocument.
registry : package
    Component registry and section dispatch.
results : module
    Return types of public API functions.
exceptions : module
    Exception hierarchy.
logging : module
    Pluggable verbose/debug logger.
"""

__version__ = "0.1.0"
__description__ = "Per-component configuration sections from a shared YAML file"

from configurability.config import ConfigDocument, ConfigList, ConfigTree
from configurability.exceptions import (
    ConfigurabilityError,
    DispatchError,
    InvalidSectionKey,
    LoadError,
    TypeMismatch,
)
from configurability.keys import SectionKey, derive_key
from configurability.registry import (
    Configurable,
    Registry,
    configure_all,
    get_registry,
    register_configurable,
    reset_configuration,
    set_registry,
    unregister_configurable,
)
from configurability.results import DispatchResult

__all__ = [
    "__version__",
    "__description__",
    "ConfigDocument",
    "ConfigTree",
    "ConfigList",
    "SectionKey",
    "derive_key",
    "Configurable",
    "Registry",
    "register_configurable",
    "unregister_configurable",
    "configure_all",
    "reset_configuration",
    "get_registry",
    "set_registry",
    "DispatchResult",
    "ConfigurabilityError",
    "LoadError",
    "TypeMismatch",
    "DispatchError",
    "InvalidSectionKey",
]
