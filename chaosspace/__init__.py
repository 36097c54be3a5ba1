"""
chaosspace module

This module contains:
 - a resource topology cache that memoizes, per target system, the flattened
   lists of workloads, endpoints, network pairs, DNS pairs, database
   operations, JVM methods and containers (topology directory)
 - the action-space encoder that derives a tree of integer domains from a
   fault configuration record, and decodes a populated tree back into a
   validated record (schema directory)
 - the catalog of fault configuration records (faults directory)
 - groundtruth (expected blast radius) and display helpers
 - common defaults (common directory) and helper functions (helpers.py)

The purpose of this module is to give an experimenter, or an automated search
or RL policy, a finite and addressable space of valid chaos experiments for a
live system. The size of the space depends on the topology of the target
system: the number of workloads, endpoints, service pairs, etc. Every point in
the space is a small tree (or a flat vector) of integers. Integers index into
the cache's sorted resource lists, so the same tree always means the same
experiment as long as the cache has not been invalidated.

Choosing which point to sample is NOT the job of this module. Neither is
building or submitting the concrete chaos objects to the execution engine.

Things to consider when adding or modifying fault records:
1. Every integer field needs either a static range or the dynamic marker. A
   dynamic field's name selects the resource list that sizes it (see
   chaosspace.schema.resolver.FIELD_ROLES).
2. Index fields are only meaningful for one cache generation. Never persist a
   decoded record across an invalidation without re-validating it.
"""
