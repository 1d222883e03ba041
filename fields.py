"""Flat field model for Shelly JSON snapshots.

A device answer such as

    {"relays": [{"ison": true, "power": 12.5}], "switch:0": {"id": 0}}

is flattened under a group prefix into

    settings_relays_0_ison  -> True
    settings_relays_0_power -> 12.5
    settings_switch_0_id    -> 0

Each leaf becomes one PropertyField (name + value type). Discovery and
polling both go through flatten(), so field names and snapshot keys always
line up.
"""

import logging
import re
from dataclasses import dataclass

log = logging.getLogger(__name__)

STRING = "string"
NUMBER = "number"
BOOLEAN = "boolean"

_UNSAFE = re.compile(r"[^A-Za-z0-9_]")


@dataclass(frozen=True)
class PropertyField:
    field_name: str
    field_type: str = STRING


def _field_type(value):
    # bool first: bool is a subclass of int
    if isinstance(value, bool):
        return BOOLEAN
    if isinstance(value, (int, float)):
        return NUMBER
    return STRING


def _join(prefix, key):
    key = _UNSAFE.sub("_", str(key))
    return f"{prefix}_{key}" if prefix else key


def flatten(data, prefix=""):
    """Flatten nested dicts/lists into {field_name: leaf value}.

    Nulls, empty dicts and empty lists produce nothing.
    """
    values = {}

    def walk(node, name):
        if isinstance(node, dict):
            for key, child in node.items():
                walk(child, _join(name, key))
        elif isinstance(node, list):
            for index, child in enumerate(node):
                walk(child, _join(name, index))
        elif node is not None:
            values[name] = node

    walk(data, prefix)
    return values


def discover_fields(data, prefix):
    """Return the sorted PropertyFields found in a device answer."""
    if not isinstance(data, dict):
        return []
    flat = flatten(data, prefix)
    return sorted(
        (PropertyField(name, _field_type(value)) for name, value in flat.items()),
        key=lambda f: f.field_name,
    )


def project(values, fields, variables):
    """Bind each field's snapshot value under its field name into variables.

    Fields missing from the snapshot are skipped.
    Returns the number of variables written.
    """
    written = 0
    for field in fields:
        if field.field_name in values:
            variables[field.field_name] = values[field.field_name]
            written += 1
    log.debug("projected %d of %d fields", written, len(fields))
    return written
