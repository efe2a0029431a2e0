import threading
import time

from portfolio.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_STALE_AFTER = 300.0


def _hashable(value):
    if isinstance(value, (list, tuple, set)):
        return tuple(_hashable(item) for item in value)
    if isinstance(value, dict):
        return frozenset((key, _hashable(item)) for key, item in value.items())
    return value


class QueryCache:
    """
    Remembers fetched API results per ``(resource, user_id, params)`` key.

    An entry older than ``stale_after`` seconds is refetched on its next use.
    Concurrent requests for the same key wait on a single fetch instead of
    each hitting the API. Mutations call ``invalidate(resource)``.
    """

    def __init__(self, stale_after=DEFAULT_STALE_AFTER, clock=time.monotonic):
        self.stale_after = stale_after
        self._clock = clock
        self._entries = {}
        self._key_locks = {}
        self._lock = threading.Lock()

    @staticmethod
    def make_key(resource, user_id=None, params=None):
        return (resource, user_id, frozenset((key, _hashable(value)) for key, value in (params or {}).items()))

    def _fresh(self, key):
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry[1] >= self.stale_after:
            return None
        return entry

    def get(self, key, fetch):
        entry = self._fresh(key)
        if entry is not None:
            return entry[0]

        with self._lock:
            key_lock = self._key_locks.setdefault(key, threading.Lock())
        with key_lock:
            # another caller may have finished the fetch while we waited
            entry = self._fresh(key)
            if entry is not None:
                return entry[0]
            logger.debug("Cache miss for %s", key[0])
            value = fetch()
            with self._lock:
                self._entries[key] = (value, self._clock())
                self._key_locks.pop(key, None)
            return value

    def invalidate(self, resource):
        with self._lock:
            stale = [key for key in self._entries if key[0] == resource]
            for key in stale:
                del self._entries[key]
        return len(stale)

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __contains__(self, key):
        return self._fresh(key) is not None

    def __len__(self):
        with self._lock:
            return len(self._entries)
