"""Property groups: one cacheable snapshot per device endpoint."""

import threading
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Empty:
    """Nothing fetched yet."""


@dataclass(frozen=True)
class Snapshot:
    values: dict
    fetched_at: float   # clock() reading after the fetch completed


EMPTY = Empty()


@dataclass
class PropertyGroup:
    name: str
    command: str                       # endpoint template, e.g. http://{provider_host}/status
    prefix: str = ""                   # field name prefix, e.g. "status"
    fields: list = field(default_factory=list)
    cache_seconds: int = 0             # 0 = fetch on every poll
    cache: object = EMPTY
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def cached_values(self, now):
        """Return the cached snapshot if still within its lifetime, else None."""
        if self.cache_seconds <= 0 or not isinstance(self.cache, Snapshot):
            return None
        if now - self.cache.fetched_at > self.cache_seconds:
            return None
        return self.cache.values

    def store(self, values, now):
        self.cache = Snapshot(values, now)
