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

"""YAML reading, writing and merging for configurability.

ConfigDocument keeps its file handling here so the document class only
deals with ownership of the tree, paths and timestamps.

Merge Behavior
--------------
Defaults are merged underneath loaded data with "last wins" semantics
(fill_defaults), and documents are merged the same way (deep_merge_dicts):
  - **Dicts**: Recursively merged (keys from overlay override base)
  - **Lists**: Completely replaced (NOT appended/extended)
  - **Scalars**: Overwritten (strings, numbers, booleans)

fill_defaults keeps the key order of the loaded data, so a document
loaded with defaults still dumps its keys in file order.

Error Handling
--------------
- LoadError: Missing file, unreadable file, YAML syntax error, or a
  top-level value that is not a mapping
- All errors are chained with "from err" for better debugging
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from configurability.exceptions import LoadError

# -------------------------------
# Reading
# -------------------------------


def parse_yaml_text(text: str, source: str = "<string>") -> dict[str, Any]:
    """Parse YAML text into a top-level mapping.

    An empty document parses to an empty mapping.

    Args:
        text: YAML source text.
        source: Where the text came from, used in error messages.

    Returns:
        The parsed mapping.

    Raises:
        LoadError: On YAML syntax errors or when the top level is not a
            mapping.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as err:
        raise LoadError(f"Error parsing YAML: {source}: {err}") from err

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise LoadError(
            f"Top-level YAML must be a mapping, got {type(data).__name__}: {source}"
        )
    return data


def load_yaml_file(p: Path) -> dict[str, Any]:
    """Read and parse a YAML file.

    Raises:
        LoadError: When the file does not exist, cannot be read, or does not
            contain a YAML mapping.
    """
    try:
        text = p.read_text(encoding="utf-8")
    except FileNotFoundError as err:
        raise LoadError(f"Config file not found: {p}") from err
    except (OSError, UnicodeDecodeError) as err:
        raise LoadError(f"Could not read config file: {p}: {err}") from err
    return parse_yaml_text(text, str(p))


# -------------------------------
# Writing
# -------------------------------


def dump_yaml(data: dict[str, Any]) -> str:
    """Serialize a mapping to YAML text.

    Keys keep their insertion order; block style is used throughout.
    """
    return yaml.safe_dump(
        data, default_flow_style=False, sort_keys=False, allow_unicode=True
    )


def write_yaml_file(text: str, p: Path) -> None:
    """Write already-serialized YAML text to a file.

    Creates parent directories if needed.
    """
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        f.write(text)


# -------------------------------
# Merge logic
# -------------------------------


def deep_merge_dicts(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """
    Deep-merge two dicts with "overlay wins".

    Rules:
      - dict + dict -> deep merge
      - list + list -> overlay REPLACES base (not concatenated)
      - everything else -> overlay overwrites base

    This function does not mutate inputs; returns a new dict.
    """
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = deep_merge_dicts(result[k], v)
        else:
            result[k] = v
    return result


def fill_defaults(data: dict[str, Any], defaults: dict[str, Any]) -> dict[str, Any]:
    """
    Fill keys missing from 'data' with values from 'defaults'.

    Same result as deep_merge_dicts(defaults, data), but keys keep the
    order they have in 'data'; keys only found in 'defaults' follow them.

    Rules:
      - dict + dict -> filled recursively
      - key missing from data -> taken from defaults
      - everything else -> data wins

    This function does not mutate inputs; returns a new dict.
    """
    result: dict[str, Any] = dict(data)
    for k, v in defaults.items():
        if k not in result:
            result[k] = v
        elif isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = fill_defaults(result[k], v)
    return result
