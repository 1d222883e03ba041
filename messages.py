"""English message bundle for command labels and connection-test output.

Commands only ever carry message keys; translation happens where text
is shown to a person.
"""

import logging

log = logging.getLogger(__name__)

DEFAULT_MESSAGES = {
    "shelly.title": "Shelly device",
    "shelly.relay": "Relay",
    "shelly.light": "Light",
    "shelly.roller": "Roller",
    "shelly.option.on": "On",
    "shelly.option.off": "Off",
    "shelly.option.toggle": "Toggle",
    "shelly.option.open": "Open",
    "shelly.option.close": "Close",
    "shelly.connection.successful": "Connection to Shelly {0} successful, device type: {1}",
}

for _pos in range(0, 101, 10):
    DEFAULT_MESSAGES[f"shelly.roller.position.{_pos}"] = f"Position {_pos}%"
del _pos


class Messages:
    """Key lookup with {0}-style positional formatting."""

    def __init__(self, messages=None):
        self._messages = dict(DEFAULT_MESSAGES if messages is None else messages)

    def get(self, key, *args):
        text = self._messages.get(key)
        if text is None:
            log.debug("no message for key %s", key)
            return key
        return text.format(*args) if args else text
