"""Capability discovery and command synthesis.

Controllable entities are found by matching field names of the
configuration-bearing property group against a per-generation regex.
Capture group 1 picks the entity kind, group 2 its zero-based index.
Each kind maps to a label key and an option builder; adding a device
family means adding a row to the rules table.

Option values are partial action strings appended to the generation's
base URL when a command is sent, e.g.

    Gen1: relay/0?turn=on          -> http://<host>/relay/0?turn=on
    Gen2: Switch.Set?id=0&on=true  -> http://<host>/rpc/Switch.Set?id=0&on=true
"""

import logging
import re
from dataclasses import dataclass
from functools import partial
from typing import Callable, Optional, Tuple

log = logging.getLogger(__name__)

GROUP = "Shelly"
POSITIONS = tuple(range(0, 101, 10))   # 0, 10, ..., 100


@dataclass(frozen=True)
class ValueText:
    value: str   # action token sent to the device
    text: str    # message key shown to the user


@dataclass(frozen=True)
class Command:
    group: str
    label: str
    options: Tuple[ValueText, ...]
    category: Optional[str] = None
    sort_index: int = 0


@dataclass(frozen=True)
class EntityRule:
    label: str
    build_options: Callable[[int], Tuple[ValueText, ...]]


def _position_text(pos):
    return f"shelly.roller.position.{pos}"


# ---------------------------------------------------------------------------
# Gen1 option builders
# ---------------------------------------------------------------------------

def _gen1_turn_options(path, index):
    action = f"{path}/{index}?turn="
    return (
        ValueText(action + "on", "shelly.option.on"),
        ValueText(action + "off", "shelly.option.off"),
        ValueText(action + "toggle", "shelly.option.toggle"),
    )


def _gen1_roller_options(index):
    action = f"roller/{index}/go="
    options = [
        ValueText(action + "open", "shelly.option.open"),
        ValueText(action + "close", "shelly.option.close"),
    ]
    for pos in POSITIONS:
        options.append(ValueText(f"{action}to_pos&roller_pos={pos}", _position_text(pos)))
    return tuple(options)


# ---------------------------------------------------------------------------
# Gen2 option builders
# ---------------------------------------------------------------------------

def _gen2_switch_options(method, index):
    return (
        ValueText(f"{method}.Set?id={index}&on=true", "shelly.option.on"),
        ValueText(f"{method}.Set?id={index}&on=false", "shelly.option.off"),
        ValueText(f"{method}.Toggle?id={index}", "shelly.option.toggle"),
    )


def _gen2_cover_options(index):
    options = [
        ValueText(f"Cover.Open?id={index}", "shelly.option.open"),
        ValueText(f"Cover.Close?id={index}", "shelly.option.close"),
    ]
    for pos in POSITIONS:
        options.append(ValueText(f"Cover.GoToPosition?id={index}&pos={pos}", _position_text(pos)))
    return tuple(options)


# ---------------------------------------------------------------------------
# Discovery tables
# ---------------------------------------------------------------------------

GEN1_PATTERN = re.compile(r"(relays|lights|rollers)_(\d+)_(ison|power)")
GEN1_RULES = {
    "relays": EntityRule("shelly.relay", partial(_gen1_turn_options, "relay")),
    "lights": EntityRule("shelly.light", partial(_gen1_turn_options, "light")),
    "rollers": EntityRule("shelly.roller", _gen1_roller_options),
}

GEN2_PATTERN = re.compile(r"configuration_(cover|switch|light)_(\d+)_id")
GEN2_RULES = {
    "switch": EntityRule("shelly.relay", partial(_gen2_switch_options, "Switch")),
    "light": EntityRule("shelly.light", partial(_gen2_switch_options, "Light")),
    "cover": EntityRule("shelly.roller", _gen2_cover_options),
}


def sort_key(command):
    return (command.sort_index, command.label)


def discover_commands(fields, pattern, rules):
    """Build the sorted command catalog from a list of PropertyFields.

    Several fields for one entity (e.g. _ison and _power of relay 0)
    yield equal Commands and collapse in the set.
    """
    commands = set()
    for field in fields:
        match = pattern.search(field.field_name)
        if match is None:
            continue
        kind = match.group(1)
        rule = rules.get(kind)
        if rule is None:
            log.debug("skipping unsupported entity kind %s in %s", kind, field.field_name)
            continue
        index = int(match.group(2))
        commands.add(Command(GROUP, rule.label, rule.build_options(index), None, index + 1))
    return sorted(commands, key=sort_key)


def describe_command(command, messages):
    """Translate a command into (label, [(value, text), ...]) for display."""
    label = messages.get(command.label)
    if command.sort_index:
        label = f"{label} {command.sort_index - 1}"
    return label, [(opt.value, messages.get(opt.text)) for opt in command.options]
