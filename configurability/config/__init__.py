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

"""Configuration trees and documents for configurability.

Public API:

- ConfigTree: Map node with attribute-style and map-style access
- ConfigList: Sequence node
- ConfigDocument: A tree plus its backing file (load, reload, dump, write)

Example:
    Basic usage:

        from configurability.config import ConfigDocument

        config = ConfigDocument.load("config.yml")
        config.database.testing.adapter = "mysql"
        assert config["database"]["testing"]["adapter"] == "mysql"
        config.write()

"""

from .document import ConfigDocument
from .tree import ConfigList, ConfigTree

__all__ = ["ConfigDocument", "ConfigList", "ConfigTree"]
