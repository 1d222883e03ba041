"""Common contract for the two Shelly API generations.

ShellyGen1 (flat endpoints: /settings, /status, /relay/0?turn=on) and
ShellyGen2 (RPC: /rpc/shelly.GetConfig, /rpc/Switch.Set?id=0&on=true)
are the only implementations. The facade in shelly.py picks one per device
and keeps it.
"""

import logging
import time
from abc import ABC, abstractmethod

from requests.auth import HTTPBasicAuth

import commands
from devices.connection import HttpConnection
from fields import discover_fields, flatten, project
from placeholders import resolve_url
from properties import PropertyGroup

log = logging.getLogger(__name__)


class ShellyAdapter(ABC):
    """Discovery, polling and command dispatch for one API generation."""

    GENERATION = None
    BASE_URL = None
    COMMAND_GROUP = None       # group whose fields drive command discovery
    PATTERN = None
    RULES = {}
    AUTH_CLASS = HTTPBasicAuth

    def __init__(self, connection_factory=HttpConnection, clock=time.monotonic,
                 cancel_event=None):
        self.connection_factory = connection_factory
        self.clock = clock
        self.cancel_event = cancel_event
        self.setting = None
        self.connection = None
        self._available_commands = []

    # -----------------------------------------------------------------------
    # Connection
    # -----------------------------------------------------------------------

    def bind(self, setting):
        """Store the setting and create a fresh connection for it."""
        if self.connection is not None:
            self.connection.close()
        self.setting = setting
        self.connection = self.connection_factory(
            setting, auth_class=self.AUTH_CLASS, cancel_event=self.cancel_event,
        )

    def _require_connection(self):
        if self.connection is None:
            raise RuntimeError(f"{type(self).__name__} not bound, call bind() first")

    def fetch(self, template):
        """GET a JSON object from an endpoint template."""
        self._require_connection()
        return self.connection.get_json(resolve_url(template, self.setting))

    def create_group(self, name, endpoint, prefix, cache_seconds):
        """Fetch one endpoint and describe its fields as a PropertyGroup."""
        command = self.BASE_URL + endpoint
        fields = discover_fields(self.fetch(command), prefix)
        log.debug("%s: %d field(s) from %s", name, len(fields), endpoint)
        return PropertyGroup(name, command, prefix, fields, cache_seconds)

    # -----------------------------------------------------------------------
    # First run
    # -----------------------------------------------------------------------

    @abstractmethod
    def discover_groups(self):
        """Fetch this generation's endpoints and return the usable PropertyGroups."""

    def initialize(self, provider_data):
        """One-time discovery. Returns (groups, commands) and records both."""
        self.bind(provider_data.setting)
        groups = self.discover_groups()
        self._available_commands = self.commands_from_groups(groups)
        provider_data.property_groups = groups
        provider_data.properties_changed = True
        provider_data.available_commands = self._available_commands
        log.debug("available commands: %d", len(self._available_commands))
        return groups, self._available_commands

    def restore(self, groups):
        """Rebuild the command catalog from previously discovered groups."""
        self._available_commands = self.commands_from_groups(groups)
        return self._available_commands

    def commands_from_groups(self, groups):
        for group in groups:
            if group.name == self.COMMAND_GROUP:
                return self.discover_commands(group.fields)
        return []

    def discover_commands(self, fields):
        return commands.discover_commands(fields, self.PATTERN, self.RULES)

    def project_tables(self, fields):
        return []

    @property
    def available_commands(self):
        return self._available_commands

    # -----------------------------------------------------------------------
    # Activity work
    # -----------------------------------------------------------------------

    def poll_group(self, group, variables):
        """Project the group's snapshot into variables, fetching if the cache is stale.

        The cache is only replaced after a complete fetch; a failed or
        cancelled request leaves the previous snapshot in place.
        """
        with group.lock:
            values = group.cached_values(self.clock())
            if values is None:
                values = flatten(self.fetch(group.command), group.prefix)
                group.store(values, self.clock())
            else:
                log.debug("use cached value for %s", group.name)
        return project(values, group.fields, variables)

    def send_command(self, action):
        """Send one action token. The device's answer is not inspected."""
        self._require_connection()
        url = resolve_url(self.BASE_URL + action, self.setting)
        log.debug("send action url %s", url)
        self.connection.get(url)
