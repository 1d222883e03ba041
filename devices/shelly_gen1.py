"""Shelly Gen1 devices (Shelly 1, 2.5, EM, 3EM, Dimmer, ...).

Uses the flat HTTP API:
- /settings  → relays/lights/rollers configuration (cached 1 h)
- /status    → live power, meters, temperature (never cached)
- /shelly    → type, MAC, firmware (cached 1 h)

Commands are sent as /relay/0?turn=on, /roller/0/go=to_pos&roller_pos=50, ...
"""

import logging

import commands
import config
from devices.shelly_base import ShellyAdapter
from placeholders import resolve_url
from tables import project_tables

log = logging.getLogger(__name__)


class ShellyGen1(ShellyAdapter):

    GENERATION = 1
    BASE_URL = config.GEN1_BASE_URL
    COMMAND_GROUP = "Settings"
    PATTERN = commands.GEN1_PATTERN
    RULES = commands.GEN1_RULES
    # (group name, endpoint); the endpoint doubles as field prefix
    GROUPS = (
        ("Settings", "settings"),
        ("Status", "status"),
        ("Shelly", "shelly"),
    )

    def discover_groups(self):
        return [
            self.create_group(name, endpoint, endpoint, config.GEN1_CACHE_SECONDS[name])
            for name, endpoint in self.GROUPS
        ]

    def project_tables(self, fields):
        return project_tables(fields)

    def get_standard_values(self):
        """Fetch /shelly. Both generations answer it; Gen2 adds a "model" key.

        Unlike snapshot fetches an error status raises requests.HTTPError,
        so a failed probe never binds a generation.
        """
        self._require_connection()
        resp = self.connection.get(resolve_url(self.BASE_URL + config.PROBE_ENDPOINT, self.setting))
        resp.raise_for_status()
        data = resp.json()
        return data if isinstance(data, dict) else {}

    def get_name(self):
        """Return the configured device name from /settings, or ""."""
        name = self.fetch(self.BASE_URL + "settings").get("name")
        return "" if name is None else str(name)
