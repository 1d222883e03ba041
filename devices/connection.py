"""HTTP connection to a Shelly device.

One requests.Session per bound setting. Transport failures
(requests.ConnectionError, Timeout, ...) propagate to the caller;
there is no retry at this level.
"""

import logging
import threading

import requests
from requests.auth import HTTPBasicAuth

import config

log = logging.getLogger(__name__)


class RequestCancelled(Exception):
    """The caller's cancel event was set before or during a request."""


class HttpConnection:
    """GET-only JSON client for the local device API."""

    def __init__(self, setting, auth_class=HTTPBasicAuth, cancel_event=None):
        self.setting = setting
        self.cancel_event = cancel_event
        self.session = requests.Session()
        if setting.user:
            self.session.auth = auth_class(setting.user, setting.password or "")

    def _check_cancelled(self, url):
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise RequestCancelled(f"request to {url} cancelled")

    def get(self, url):
        """Issue one GET and return the response whatever its status.

        With a cancel event the request runs on a worker thread, so a set
        event releases the caller without waiting for the read timeout.
        """
        self._check_cancelled(url)
        if self.cancel_event is None:
            return self.session.get(url, timeout=config.HTTP_TIMEOUT)

        done = threading.Event()
        outcome = {}

        def request():
            try:
                outcome["resp"] = self.session.get(url, timeout=config.HTTP_TIMEOUT)
            except Exception as e:
                outcome["error"] = e
            finally:
                done.set()

        threading.Thread(target=request, name=f"GET {url}", daemon=True).start()
        while not done.wait(config.CANCEL_CHECK_SECONDS):
            self._check_cancelled(url)

        if "error" in outcome:
            # A session closed by cancel() fails the read with ConnectionError.
            if self.cancel_event.is_set():
                raise RequestCancelled(f"request to {url} cancelled") from outcome["error"]
            raise outcome["error"]
        # A response that arrives after cancellation is dropped unseen.
        self._check_cancelled(url)
        return outcome["resp"]

    def get_json(self, url):
        """GET a JSON object. Returns {} for error statuses or malformed bodies."""
        resp = self.get(url)
        if not resp.ok:
            log.warning("%s answered HTTP %s, treating as empty", url, resp.status_code)
            return {}
        try:
            data = resp.json()
        except ValueError:
            log.warning("%s did not return JSON, treating as empty", url)
            return {}
        if not isinstance(data, dict):
            log.warning("%s returned %s instead of an object, treating as empty",
                        url, type(data).__name__)
            return {}
        return data

    def cancel(self):
        """Abort the request in flight and refuse new ones."""
        if self.cancel_event is None:
            self.cancel_event = threading.Event()
        self.cancel_event.set()
        self.session.close()

    def close(self):
        self.session.close()
