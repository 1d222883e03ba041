from __future__ import annotations

import pytest
import requests

from devices.connection import RequestCancelled
from state import ProviderData, Setting

HOST = "192.0.2.10"
GEN1 = f"http://{HOST}/"
GEN2 = f"http://{HOST}/rpc/"

GEN1_SHELLY = {"type": "SHSW-25", "mac": "A4CF12F45A2B", "auth": False, "fw": "20230913-112003"}

GEN1_SETTINGS = {
    "name": "garage",
    "relays": [
        {"name": None, "ison": False, "power": 0, "default_state": "off"},
        {"name": "pump", "ison": True, "power": 0, "default_state": "last"},
    ],
    "device": {"type": "SHSW-25", "mac": "A4CF12F45A2B"},
}

GEN1_STATUS = {
    "relays": [{"ison": False}, {"ison": True}],
    "meters": [
        {"power": 0.0, "is_valid": True, "total": 1200},
        {"power": 42.5, "is_valid": True, "total": 8800},
    ],
    "temperature": 48.2,
    "uptime": 123456,
}

GEN2_SHELLY = {
    "name": "garden",
    "id": "shellyplus1-a8032ab12345",
    "mac": "A8032AB12345",
    "model": "SNSW-001X16EU",
    "gen": 2,
}

GEN2_CONFIG = {
    "switch:0": {"id": 0, "name": None, "in_mode": "follow", "initial_state": "match_input"},
    "input:0": {"id": 0, "type": "switch"},
    "sys": {"device": {"name": "garden", "mac": "A8032AB12345"}},
}

GEN2_STATUS = {
    "switch:0": {"id": 0, "source": "init", "output": True, "apower": 11.2,
                 "temperature": {"tC": 43.1, "tF": 109.6}},
    "sys": {"uptime": 812},
}


class FakeResponse:
    """Minimal requests.Response: a status code and a JSON payload."""

    def __init__(self, payload=None, status_code=200):
        self.payload = payload
        self.status_code = status_code

    @property
    def ok(self):
        return self.status_code < 400

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} Server Error", response=self)

    def json(self):
        return self.payload


class FakeConnection:
    """Stands in for HttpConnection; answers from FakeDevice.responses.

    A response may be a payload, a FakeResponse or an exception to raise.
    """

    def __init__(self, device, setting, auth_class=None, cancel_event=None):
        self.device = device
        self.setting = setting
        self.auth_class = auth_class
        self.cancel_event = cancel_event
        self.closed = False

    def get(self, url):
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise RequestCancelled(f"request to {url} cancelled")
        self.device.calls.append(url)
        answer = self.device.responses.get(url, {})
        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, FakeResponse):
            return answer
        return FakeResponse(answer)

    def get_json(self, url):
        resp = self.get(url)
        return resp.payload if resp.ok else {}

    def cancel(self):
        self.cancel_event.set()
        self.closed = True

    def close(self):
        self.closed = True


class FakeDevice:
    """Connection factory that records every URL requested."""

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []
        self.connections = []

    def __call__(self, setting, auth_class=None, cancel_event=None):
        conn = FakeConnection(self, setting, auth_class, cancel_event)
        self.connections.append(conn)
        return conn

    def count(self, url):
        return self.calls.count(url)


@pytest.fixture
def setting() -> Setting:
    return Setting(host=HOST)


@pytest.fixture
def provider_data(setting: Setting) -> ProviderData:
    return ProviderData(setting=setting)


@pytest.fixture
def gen1_device() -> FakeDevice:
    return FakeDevice({
        GEN1 + "shelly": GEN1_SHELLY,
        GEN1 + "settings": GEN1_SETTINGS,
        GEN1 + "status": GEN1_STATUS,
    })


@pytest.fixture
def gen2_device() -> FakeDevice:
    # sys.GetConfig and shelly.GetComponents answer nothing on this model
    return FakeDevice({
        GEN1 + "shelly": GEN2_SHELLY,
        GEN2 + "shelly.GetConfig": GEN2_CONFIG,
        GEN2 + "shelly.GetStatus": GEN2_STATUS,
        GEN2 + "sys.GetStatus": {"uptime": 812, "ram_free": 150000},
        GEN2 + "shelly.GetDeviceInfo": GEN2_SHELLY,
    })


class Clock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> Clock:
    return Clock()
