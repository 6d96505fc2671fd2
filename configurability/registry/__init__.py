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

"""Component registry and section dispatch for configurability.

Public API:

- Registry: Weak-reference set of components with dispatch()
- Configurable: Mixin with the default configure() behavior
- ConfigurableComponent: Protocol describing the configure() hook
- register_configurable / unregister_configurable: Membership in the
  process-wide registry
- configure_all: Dispatch a document to the process-wide registry
- reset_configuration: Deliver None to every registered component
- get_registry / set_registry: Access or replace the process-wide registry

"""

from .base import (
    Configurable,
    ConfigurableComponent,
    Registry,
    RegistryEntry,
    configure_all,
    get_registry,
    register_configurable,
    reset_configuration,
    set_registry,
    unregister_configurable,
)

__all__ = [
    "Configurable",
    "ConfigurableComponent",
    "Registry",
    "RegistryEntry",
    "configure_all",
    "get_registry",
    "register_configurable",
    "reset_configuration",
    "set_registry",
    "unregister_configurable",
]
