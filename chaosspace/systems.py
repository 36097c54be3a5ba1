import json
from collections import namedtuple
from os.path import expanduser
from typing import List

from logzero import logger

from chaosspace.common import DEFAULT_CHAOS_NAMESPACE_INDEX

SystemConfig = namedtuple('SystemConfig', ['name', 'namespace_prefix'])

DEFAULT_SYSTEMS = (
    SystemConfig('ts', 'ts'),
    SystemConfig('otel-demo', 'otel-demo'),
    SystemConfig('media', 'media'),
    SystemConfig('hs', 'hs'),
    SystemConfig('sn', 'sn'),
    SystemConfig('ob', 'ob'),
)


class SystemRegistry(object):
    """
    The ordered list of target systems an action space may address.

    The position of a system in the registry is the value stored in a fault
    record's 'system' field. Namespaces follow the <prefix><index> pattern,
    e.g. ts0, ts1, ...

    :param systems: The systems, in index order.
    :type systems: List[SystemConfig]
    """

    def __init__(self, systems: List[SystemConfig] = DEFAULT_SYSTEMS):
        names = [s.name for s in systems]
        if len(set(names)) != len(names):
            raise ValueError("duplicate system names: {}".format(names))
        if not systems:
            raise ValueError("at least one system is required")
        self._systems = tuple(systems)

    def __len__(self):
        return len(self._systems)

    def __contains__(self, name):
        return any(s.name == name for s in self._systems)

    def names(self) -> List[str]:
        return [s.name for s in self._systems]

    def index_of(self, name: str) -> int:
        for index, system in enumerate(self._systems):
            if system.name == name:
                return index
        raise ValueError("invalid system type: {}, valid types are: "
                         "{}".format(name, ", ".join(self.names())))

    def by_index(self, index: int) -> SystemConfig:
        if index < 0 or index >= len(self._systems):
            raise IndexError("system index {} out of range (max: "
                             "{})".format(index, len(self._systems) - 1))
        return self._systems[index]

    def namespace_for(self, name: str,
                      index: int = DEFAULT_CHAOS_NAMESPACE_INDEX) -> str:
        """
        Generate a namespace name based on the system and index.

        :param name: The system name.
        :type name: str
        :param index: The namespace index.
            Optional. (Default:
            chaosspace.common.DEFAULT_CHAOS_NAMESPACE_INDEX)
        :type index: int
        :return: str
        """
        system = self._systems[self.index_of(name)]
        return "{}{}".format(system.namespace_prefix, index)

    def describe(self) -> str:
        pairs = ["{}: {}".format(s.name, i)
                 for i, s in enumerate(self._systems)]
        return "{" + ", ".join(pairs) + "}"


def load_systems(systems_file: str) -> SystemRegistry:
    """
    Load a system registry from a JSON file.

    The file holds a list of objects with 'name' and (optionally)
    'namespace_prefix' keys. The prefix defaults to the name.

    :param systems_file: The relative or absolute path to the JSON file.
    :type systems_file: str
    :return: SystemRegistry
    """
    with open(expanduser(systems_file), 'r') as systemsfile:
        entries = json.load(systemsfile)
    systems = [SystemConfig(e['name'], e.get('namespace_prefix', e['name']))
               for e in entries]
    logger.debug("Loaded %d systems from %s", len(systems), systems_file)
    return SystemRegistry(systems)
