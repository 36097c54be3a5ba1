from typing import Tuple

from logzero import logger

from chaosspace.common import Role
from chaosspace.errors import (NoResourcesError, RangeResolutionError,
                               SchemaError, TopologyUnavailableError)
from chaosspace.systems import SystemRegistry
from chaosspace.topology.manager import CacheManager

# The field names that bind a dynamic field to a resource list
FIELD_ROLES = {
    'system': Role.SYSTEM,
    'namespace': Role.SYSTEM,
    'app_idx': Role.WORKLOAD,
    'endpoint_idx': Role.ENDPOINT,
    'network_pair_idx': Role.NETWORK,
    'dns_endpoint_idx': Role.DNS,
    'database_idx': Role.DATABASE,
    'method_idx': Role.METHOD,
    'container_idx': Role.CONTAINER,
}


def role_of(field) -> Role:
    """
    The role of a dynamic field: its explicit role, else the one bound to its
    name in FIELD_ROLES.

    :param field: The field descriptor.
    :type field: chaosspace.schema.fields.IntField
    :return: chaosspace.common.Role
    """
    role = field.role
    if role is None:
        role = FIELD_ROLES.get(field.name)
        if role is None:
            raise SchemaError("unknown dynamic field '{}': valid names are "
                              "{}".format(field.name,
                                          ", ".join(sorted(FIELD_ROLES))),
                              field=field.name)
        return role
    if isinstance(role, Role):
        return role
    if not Role.has_value(role):
        raise SchemaError("field '{}': unknown role {!r}".format(field.name,
                                                                 role),
                          field=field.name)
    return Role(role)


class RangeResolver(object):
    """
    Maps a dynamic field to the bounds [0, N-1] of the resource list its role
    names. Resource lists are read from the system's cache, so the bounds of
    a field only change when that cache is invalidated.

    :param manager: The resource cache registry.
    :type manager: chaosspace.topology.manager.CacheManager
    :param systems: The target systems. Sizes SYSTEM role fields.
        Optional. (Default: SystemRegistry())
    :type systems: chaosspace.systems.SystemRegistry
    """

    def __init__(self, manager: CacheManager, systems: SystemRegistry = None):
        self.manager = manager
        self.systems = systems or SystemRegistry()

    def resources(self, role: Role, system: str, namespace: str,
                  timeout=None):
        """
        The resource list a role indexes into.

        :return: Tuple
        """
        if role is Role.SYSTEM:
            return tuple(self.systems.names())
        cache = self.manager.get_system_cache(system)
        if role is Role.WORKLOAD:
            return cache.get_all_workloads(namespace, timeout=timeout)
        if role is Role.ENDPOINT:
            return cache.get_all_endpoints(timeout)
        if role is Role.NETWORK:
            return cache.get_all_network_pairs(timeout)
        if role is Role.DNS:
            return cache.get_all_dns_endpoints(timeout)
        if role is Role.DATABASE:
            return cache.get_all_database_operations(timeout)
        if role is Role.METHOD:
            return cache.get_all_methods(timeout)
        if role is Role.CONTAINER:
            return cache.get_all_containers(namespace, timeout)
        raise SchemaError("unsupported role {!r}".format(role))

    def resolve(self, role: Role, system: str, namespace: str,
                timeout=None) -> Tuple[int, int]:
        """
        Resolve a role to inclusive index bounds.

        :param role: The resource role.
        :type role: chaosspace.common.Role
        :param system: The target system.
        :type system: str
        :param namespace: The namespace, for namespace scoped lists
            (workloads and containers).
        :type namespace: str
        :param timeout: Seconds the lookup may take, or a Deadline shared
            with other lookups.
            Optional. (Default: the cache's timeout)
        :type timeout: Union[int,float,None,chaosspace.helpers.Deadline]
        :return: Tuple[int, int]
        """
        try:
            items = self.resources(role, system, namespace, timeout)
        except TopologyUnavailableError as e:
            raise RangeResolutionError("cannot resolve {} range for system "
                                       "{}: {}".format(role.value, system, e),
                                       field=role.value) from e
        if not items:
            logger.warning("No %s resources found for system %s namespace %s",
                           role.value, system, namespace)
            raise NoResourcesError("no {} resources available for system {} "
                                   "namespace {}".format(role.value, system,
                                                         namespace),
                                   field=role.value)
        return 0, len(items) - 1

    def field_range(self, field, system: str, namespace: str,
                    timeout=None) -> Tuple[int, int]:
        """
        The bounds of a field: static for a static field, resolved for a
        dynamic one. Both are limited to the declared width.
        """
        if not field.dynamic:
            return field.range
        try:
            bounds = self.resolve(role_of(field), system, namespace, timeout)
        except RangeResolutionError as e:
            if e.field != field.name:
                e.field = field.name
            raise
        return field.clamp(bounds)
