import threading
import time
from contextlib import contextmanager

from chaosspace.topology.provider import StaticTopologyProvider


@contextmanager
def patch(owner, attr, value):
    """Monkey patch context manager.

    with patch(os, 'open', myopen):
        ...
    """
    old = getattr(owner, attr)
    setattr(owner, attr, value)
    try:
        yield getattr(owner, attr)
    finally:
        setattr(owner, attr, old)


class CountingProvider(StaticTopologyProvider):
    """Counts (and optionally slows down) every provider call."""

    def __init__(self, documents, delay=0):
        super().__init__(documents)
        self.delay = delay
        self.calls = {}
        self._calls_lock = threading.Lock()

    def _count(self, key):
        with self._calls_lock:
            self.calls[key] = self.calls.get(key, 0) + 1
        if self.delay:
            time.sleep(self.delay)

    def list_workload_labels(self, system, namespace, label_key):
        self._count('labels')
        return super().list_workload_labels(system, namespace, label_key)

    def _list_resources(self, system, kind, namespace=None):
        self._count(kind.value)
        return super()._list_resources(system, kind, namespace)


class BlockingProvider(StaticTopologyProvider):
    def __init__(self, documents):
        super().__init__(documents)
        self.release = threading.Event()

    def _list_resources(self, system, kind, namespace=None):
        self.release.wait(5)
        return super()._list_resources(system, kind, namespace)


class FailingProvider(StaticTopologyProvider):
    def _list_resources(self, system, kind, namespace=None):
        raise ConnectionError("trace store unreachable")
