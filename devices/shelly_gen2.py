"""Shelly Gen2+ devices (Plus, Pro, Mini, Gen3) via the local RPC API.

Endpoints are http://<ip>/rpc/<Namespace>.<Method>. Which of the
snapshot methods answer with content depends on the model, so groups that
come back without fields are dropped at first run.

Commands: Switch.Set?id=0&on=true, Light.Toggle?id=0,
Cover.GoToPosition?id=0&pos=50, ...
"""

import logging

from requests.auth import HTTPDigestAuth

import commands
import config
from devices.shelly_base import ShellyAdapter

log = logging.getLogger(__name__)


class ShellyGen2(ShellyAdapter):

    GENERATION = 2
    BASE_URL = config.GEN2_BASE_URL
    COMMAND_GROUP = "Configuration"
    PATTERN = commands.GEN2_PATTERN
    RULES = commands.GEN2_RULES
    AUTH_CLASS = HTTPDigestAuth   # Gen2 authentication is digest only
    GROUPS = (
        ("Configuration", "shelly.GetConfig"),
        ("SysConfiguration", "sys.GetConfig"),
        ("SysStatus", "sys.GetStatus"),
        ("Status", "shelly.GetStatus"),
        ("Components", "shelly.GetComponents"),
        ("DeviceInfo", "shelly.GetDeviceInfo"),
    )

    def discover_groups(self):
        groups = []
        for name, endpoint in self.GROUPS:
            group = self.create_group(
                name, endpoint, name.lower(), config.GEN2_CACHE_SECONDS[name],
            )
            if not group.fields:
                log.info("%s: no fields from %s, skipping", name, endpoint)
                continue
            groups.append(group)
        return groups
