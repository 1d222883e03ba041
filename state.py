"""Connection setting and provider state containers."""

from dataclasses import dataclass, field

import config


@dataclass
class Setting:
    host: str = config.DEFAULT_HOST
    port: int = config.DEFAULT_PORT
    user: str = None          # optional, enables device authentication
    password: str = None

    def configuration_values(self):
        """Values available to endpoint templates as {name} placeholders."""
        host = self.host
        if self.port and self.port != 80:
            host = f"{host}:{self.port}"
        return {"provider_host": host}


@dataclass
class ProviderData:
    """What the host keeps for one Shelly device between runs.

    property_groups stays None until first-run discovery has happened;
    an empty list means discovery ran and found nothing.
    """
    setting: Setting = field(default_factory=Setting)
    property_groups: list = None
    available_commands: list = field(default_factory=list)
    tables: list = None
    properties_changed: bool = False
    tables_changed: bool = False
