from __future__ import annotations

import threading
import time

import pytest
import requests
from requests.auth import HTTPDigestAuth

import config
from devices.connection import HttpConnection, RequestCancelled
from state import Setting


class _FakeResponse:
    def __init__(self, status_code: int = 200, payload: object = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> object:
        if self._payload is None:
            raise ValueError("Expecting value")
        return self._payload


def _patch_get(monkeypatch: pytest.MonkeyPatch, response: _FakeResponse, seen: list) -> None:
    def fake_get(self, url, timeout=None):
        seen.append((url, timeout))
        return response

    monkeypatch.setattr(requests.Session, "get", fake_get)


def test_get_json_returns_object(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list = []
    _patch_get(monkeypatch, _FakeResponse(payload={"type": "SHSW-1"}), seen)

    data = HttpConnection(Setting(host="h")).get_json("http://h/shelly")

    assert data == {"type": "SHSW-1"}
    assert seen == [("http://h/shelly", config.HTTP_TIMEOUT)]


@pytest.mark.parametrize("response", [
    _FakeResponse(text="<html>not json</html>"),
    _FakeResponse(payload=[1, 2, 3]),
    _FakeResponse(status_code=404, payload={"code": 404, "message": "No handler"}),
    _FakeResponse(status_code=500, text="boom"),
])
def test_get_json_degrades_to_empty(monkeypatch: pytest.MonkeyPatch, response: _FakeResponse) -> None:
    _patch_get(monkeypatch, response, [])

    assert HttpConnection(Setting(host="h")).get_json("http://h/rpc/sys.GetConfig") == {}


def test_get_ignores_status(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_get(monkeypatch, _FakeResponse(status_code=401), [])

    resp = HttpConnection(Setting(host="h")).get("http://h/relay/0?turn=on")

    assert resp.status_code == 401


def test_transport_errors_propagate(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_get(self, url, timeout=None):
        raise requests.ConnectTimeout("timed out")

    monkeypatch.setattr(requests.Session, "get", fake_get)

    with pytest.raises(requests.ConnectTimeout):
        HttpConnection(Setting(host="h")).get_json("http://h/status")


def test_cancel_before_request(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list = []
    _patch_get(monkeypatch, _FakeResponse(payload={}), seen)
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(RequestCancelled):
        HttpConnection(Setting(host="h"), cancel_event=cancel).get_json("http://h/status")
    assert seen == []


def test_cancel_during_request_discards_response(monkeypatch: pytest.MonkeyPatch) -> None:
    cancel = threading.Event()

    def fake_get(self, url, timeout=None):
        cancel.set()
        return _FakeResponse(payload={"ison": True})

    monkeypatch.setattr(requests.Session, "get", fake_get)

    with pytest.raises(RequestCancelled):
        HttpConnection(Setting(host="h"), cancel_event=cancel).get_json("http://h/status")


def test_cancel_releases_blocked_request(monkeypatch: pytest.MonkeyPatch) -> None:
    release = threading.Event()

    def slow_get(self, url, timeout=None):
        release.wait(5)
        return _FakeResponse(payload={"ison": True})

    monkeypatch.setattr(requests.Session, "get", slow_get)
    conn = HttpConnection(Setting(host="h"), cancel_event=threading.Event())
    timer = threading.Timer(0.1, conn.cancel)
    timer.start()
    started = time.monotonic()
    try:
        with pytest.raises(RequestCancelled):
            conn.get_json("http://h/status")
        assert time.monotonic() - started < 1.0
    finally:
        timer.cancel()
        release.set()


def test_closed_session_error_becomes_cancellation(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_get(self, url, timeout=None):
        conn.cancel_event.set()
        raise requests.ConnectionError("connection closed")

    monkeypatch.setattr(requests.Session, "get", fake_get)
    conn = HttpConnection(Setting(host="h"), cancel_event=threading.Event())

    with pytest.raises(RequestCancelled):
        conn.get("http://h/status")


def test_errors_without_cancellation_propagate_from_worker(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_get(self, url, timeout=None):
        raise requests.ReadTimeout("read timed out")

    monkeypatch.setattr(requests.Session, "get", fake_get)

    with pytest.raises(requests.ReadTimeout):
        HttpConnection(Setting(host="h"), cancel_event=threading.Event()).get("http://h/status")


def test_credentials_set_session_auth() -> None:
    with_auth = HttpConnection(Setting(host="h", user="admin", password="pw"), auth_class=HTTPDigestAuth)
    without = HttpConnection(Setting(host="h"))

    assert isinstance(with_auth.session.auth, HTTPDigestAuth)
    assert with_auth.session.auth.username == "admin"
    assert without.session.auth is None
