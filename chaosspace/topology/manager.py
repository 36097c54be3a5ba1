import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List

from logzero import logger

from chaosspace.common import DEFAULT_CHAOS_PRELOAD_WORKERS
from chaosspace.topology.cache import SystemCache
from chaosspace.topology.provider import LabelProvider, TopologyProvider


class CacheManager(object):
    """
    Registry of resource topology caches, one per target system.

    get_system_cache returns the same SystemCache object for a system for the
    lifetime of the manager, unless clear() drops it. The registry lock is
    only held to look up or insert a cache, never while a cache populates, so
    caches of different systems never block each other.

    :param provider: Source of the raw resource tables of every system.
    :type provider: chaosspace.topology.provider.TopologyProvider
    :param label_provider: Source of workload labels.
        Optional. (Default: provider)
    :type label_provider: chaosspace.topology.provider.LabelProvider
    :param **cache_kwargs: Extra keyword arguments passed to every
        SystemCache (rpc_route_predicate, database_engine, timeout, ...).
    :type **cache_kwargs: Any
    """

    def __init__(self, provider: TopologyProvider,
                 label_provider: LabelProvider = None, **cache_kwargs):
        self.provider = provider
        self.label_provider = label_provider
        self._cache_kwargs = cache_kwargs
        self._caches = {}
        self._lock = threading.Lock()

    def get_system_cache(self, system: str) -> SystemCache:
        cache = self._caches.get(system)
        if cache is not None:
            return cache
        with self._lock:
            cache = self._caches.get(system)
            if cache is None:
                logger.debug("Creating resource cache for system %s", system)
                cache = SystemCache(system, self.provider,
                                    label_provider=self.label_provider,
                                    **self._cache_kwargs)
                self._caches[system] = cache
            return cache

    def systems(self) -> List[str]:
        return sorted(self._caches.keys())

    def invalidate(self, system: str):
        """
        Invalidate the cache of one system, keeping the cache object.
        """
        self.get_system_cache(system).invalidate()

    def clear(self, system: str = None):
        """
        Drop the cache of one system, or of every system when system is None.
        The next get_system_cache builds a new cache object.
        """
        with self._lock:
            if system is None:
                self._caches = {}
            else:
                self._caches.pop(system, None)

    def preload(self, namespaces: Dict[str, str], timeout=None):
        """
        Populate the caches of several systems concurrently.

        :param namespaces: System identifier to namespace mapping.
        :type namespaces: Dict[str, str]
        :param timeout: Seconds each provider call may take.
        :type timeout: Union[int,float,None]
        :return: None
        """
        errors = []
        with ThreadPoolExecutor(
                max_workers=DEFAULT_CHAOS_PRELOAD_WORKERS) as executor:
            futures = {
                system: executor.submit(self.get_system_cache(system).preload,
                                        namespace, timeout=timeout)
                for system, namespace in namespaces.items()}
            for system, future in sorted(futures.items()):
                error = future.exception()
                if error is not None:
                    logger.error("Failed to preload resource cache of system "
                                 "%s", system)
                    errors.append(error)
        if errors:
            raise errors[0]
