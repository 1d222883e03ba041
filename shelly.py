"""Shelly device facade. Binds a device to its API generation once.

First run probes /shelly. A "model" key means a Gen2+ device (RPC API),
otherwise Gen1. The choice is kept for the lifetime of the facade; later
first_run() calls only fill in what is missing from ProviderData.
"""

import logging
import threading

from devices.connection import HttpConnection
from devices.shelly_gen1 import ShellyGen1
from devices.shelly_gen2 import ShellyGen2
from messages import Messages
from state import Setting

log = logging.getLogger(__name__)

UNKNOWN = "unknown"
STATUS_GROUP = "Status"

_PLUS_1_MINI = "Shelly Plus 1 Mini"
_PRO_1 = "Shelly Pro 1"
_PRO_2 = "Shelly Pro 2"

# Device type (Gen1 "type") or model (Gen2 "model") → display name
IDENTIFIERS = {
    # Gen1
    "SHSW-1": "Shelly 1 Single Relay Switch",
    "SHSW-L": "Shelly 1L Single Relay Switch",
    "SHSW-PM": "Shelly Single Relay Switch with integrated Power Meter",
    "SHSW-21": "Shelly 2",
    "SHSW-25": "Shelly 2.5",
    "SHSW-44": "Shelly 4x Relay Switch",
    "SHDM-1": "Shelly Dimmer",
    "SHDM-2": "Shelly Dimmer2",
    "SHIX3-1": "Shelly ix3",
    "SHUNI-1": "Shelly UNI",
    "SHPLG2-1": "Shelly Plug",
    "SHPLG-S": "Shelly Plug-S",
    "SHEM": "Shelly EM with integrated Power Meters",
    "SHEM-3": "Shelly 3EM with 3 integrated Power Meter",
    "SHRGBW2": "Shelly RGBW2 Controller",
    "SHBLB-1": "Shelly Bulb",
    "SHBDUO-1": "Shelly Duo",
    "SHCB-1": "Shelly Duo Color G10",
    "SHVIN-1": "Shelly Vintage (White Mode)",
    "SHHT-1": "Shelly Sensor (temperature+humidity)",
    "SHWT-1": "Shelly Flood Sensor",
    "SHSM-1": "Shelly Smoke Sensor",
    "SHMOS-01": "Shelly Motion Sensor",
    "SHMOS-02": "Shelly Motion Sensor 2",
    "SHGS-1": "Shelly Gas Sensor",
    "SHDW-1": "Shelly Door/Window",
    "SHDW-2": "Shelly Door/Window 2",
    "SHBTN-1": "Shelly Button 1",
    "SHBTN-2": "Shelly Button 2",
    "SHSEN-1": "Shelly Motion and IR Controller",
    "SHTRV-01": "Shelly TRV",
    # Gen2 Plus
    "SNSW-001X16EU": "Shelly Plus 1",
    "SNSW-001P16EU": "Shelly Plus 1PM",
    "SNSW-002P16EU": "Shelly Plus 2PM",
    "SNSW-102P16EU": "Shelly Plus 2PM",
    "SNPL-00112EU": "Shelly Plus Plug-S",
    "SNPL-00110IT": "Shelly Plus Plug-IT",
    "SNPL-00110UK": "Shelly Plus Plug-UK",
    "SNPL-00110US": "Shelly Plus Plug-US",
    "SNSN-0024X": "Shelly Plus i4 AC",
    "SNSN-0D24X": "Shelly Plus i4 DC",
    "SNSN-0013A": "Shelly Plus HT",
    "S3SN-0U12A": "Shelly Plus HT Gen3",
    "SNSN-0031Z": "Shelly Plus Smoke sensor",
    "SNDM-0013US": "Shelly Plus Wall Dimmer US",
    "SNDC-0D4P10WW": "Shelly Plus RGBW PM",
    "SAWD-0A1XX10EU1": "Shelly Plus Wall Display",
    "SNGW-BT01": "Shelly BLU Gateway",
    # Gen2 Plus Mini (incl. Gen3)
    "SNSW-001X8EU": _PLUS_1_MINI,
    "SNSW-001P8EU": _PLUS_1_MINI,
    "S3SW-001P8EU": _PLUS_1_MINI,
    "SNPM-001PCEU16": _PLUS_1_MINI,
    "S3PM-001PCEU16": _PLUS_1_MINI,
    # Gen2 Pro
    "SPSW-001XE16EU": _PRO_1,
    "SPSW-101XE16EU": _PRO_1,
    "SPSW-201XE16EU": _PRO_1,
    "SPSW-001PE16EU": _PRO_1,
    "SPSW-101PE16EU": _PRO_1,
    "SPSW-201PE16EU": _PRO_1,
    "SPSW-002XE16EU": _PRO_2,
    "SPSW-102XE16EU": _PRO_2,
    "SPSW-202XE16EU": _PRO_2,
    "SPSW-002PE16EU": _PRO_2,
    "SPSW-102PE16EU": _PRO_2,
    "SPSW-202PE16EU": _PRO_2,
    "SPSW-003XE16EU": "Shelly Pro 3",
    "SPEM-003CEBEU": "Shelly Pro 3EM",
    "SPEM-002CEBEU50": "Shelly Pro EM50",
    "SPSW-004PE16EU": "Shelly Pro 4 PM",
    "SPSW-104PE16EU": "Shelly Pro 4 PM",
    # BLU
    "SBBT": "Shelly BLU Button 1",
    "SBDW": "Shelly BLU Door/Window",
    "SBMO": "Shelly BLU Motion",
    "SBHT": "Shelly BLU H&T",
}


def identify(code):
    """Display name for a device type/model code, "unknown" if not listed."""
    return IDENTIFIERS.get(code, UNKNOWN)


def is_plus_device(standard_values):
    """Gen2+ devices report "model" in /shelly; Gen1 devices report "type"."""
    return "model" in standard_values


class Shelly:
    """One Shelly device as seen by the host.

    Usage:
        shelly = Shelly(provider_data)
        shelly.first_run()
        shelly.poll(variables)
        shelly.send_command("relay/0?turn=on")
    """

    def __init__(self, provider_data, messages=None, connection_factory=HttpConnection,
                 cancel_event=None):
        self.provider_data = provider_data
        self.messages = messages or Messages()
        self.connection_factory = connection_factory
        self.cancel_event = cancel_event or threading.Event()
        self._impl = None

    def _adapter(self, cls):
        return cls(self.connection_factory, cancel_event=self.cancel_event)

    @property
    def bound(self):
        return self._impl is not None

    @property
    def generation(self):
        return self._impl.GENERATION if self._impl else None

    def _require_bound(self):
        if self._impl is None:
            raise RuntimeError("Shelly not bound to a generation, call first_run() first")
        return self._impl

    # -----------------------------------------------------------------------
    # Binding / first run
    # -----------------------------------------------------------------------

    def probe(self):
        """Ask /shelly which generation the device speaks and bind to it.

        An unreachable device or an error status raises and leaves the facade
        unbound, so the next first_run() probes again.
        """
        gen1 = self._adapter(ShellyGen1)
        gen1.bind(self.provider_data.setting)
        try:
            values = gen1.get_standard_values()
        except Exception:
            gen1.connection.close()
            raise
        if is_plus_device(values):
            gen1.connection.close()
            impl = self._adapter(ShellyGen2)
            impl.bind(self.provider_data.setting)
        else:
            impl = gen1
        log.info("Shelly at %s: bound to generation %d",
                 self.provider_data.setting.host, impl.GENERATION)
        return impl

    def first_run(self):
        """Bind (once), discover groups if none are stored, and project tables."""
        data = self.provider_data
        if self._impl is None:
            self._impl = self.probe()

        if data.property_groups is None:
            self._impl.initialize(data)
        elif not self._impl.available_commands:
            data.available_commands = self._impl.restore(data.property_groups)

        if data.tables is None:
            status = self._find_group(STATUS_GROUP)
            if status is not None:
                data.tables = self._impl.project_tables(status.fields)
                data.tables_changed = True

    def _find_group(self, name):
        for group in self.provider_data.property_groups or []:
            if group.name == name:
                return group
        return None

    def configuration_changed(self, setting):
        """Apply a new connection setting; the generation binding is kept."""
        self.provider_data.setting = setting
        if self._impl is not None:
            self._impl.bind(setting)

    def cancel(self):
        """Abort the request in flight, if any, and refuse further requests."""
        self.cancel_event.set()
        if self._impl is not None and self._impl.connection is not None:
            self._impl.connection.cancel()

    # -----------------------------------------------------------------------
    # Activity work
    # -----------------------------------------------------------------------

    def poll(self, variables=None):
        """Poll every property group into variables and return it."""
        impl = self._require_bound()
        if variables is None:
            variables = {}
        for group in self.provider_data.property_groups or []:
            impl.poll_group(group, variables)
        return variables

    def send_command(self, action):
        self._require_bound().send_command(action)
        log.info("sent %s", action)

    @property
    def available_commands(self):
        return self._impl.available_commands if self._impl else []

    def supported_properties(self):
        return self.provider_data.property_groups

    @staticmethod
    def default_setting():
        return Setting()

    # -----------------------------------------------------------------------
    # Connection test
    # -----------------------------------------------------------------------

    def test_connection(self, setting):
        """Identify the device behind setting without touching the binding.

        Returns a human-readable message, e.g.
        "Connection to Shelly 'garage' successful, device type: Shelly Plus 1".
        """
        test = self._adapter(ShellyGen1)
        test.bind(setting)
        try:
            result = test.get_standard_values()
            if is_plus_device(result):
                name = str(result.get("name") or "")
                code = result.get("model", UNKNOWN)
            else:
                name = test.get_name()
                code = result.get("type", UNKNOWN)
        finally:
            test.connection.close()
        if name:
            name = f"'{name}'"
        message = self.messages.get("shelly.connection.successful", name, identify(code))
        log.debug("return code is %s", message)
        return message
