"""
The fault catalog.

Every fault is a Record with a 'duration' in minutes, a dynamic 'system'
index, one dynamic index into a resource list of that system, and the
fault's own static parameters. Injection selects exactly one of them.
"""
from chaosspace.faults.injection import FAULT_TYPES, Injection  # noqa: F401
