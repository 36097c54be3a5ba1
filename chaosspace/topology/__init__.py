"""
Resource topology of a target system.

The provider module defines the two narrow contracts through which topology is
read (LabelProvider, TopologyProvider). The cache module memoizes and derives
the sorted, index-stable resource lists that dynamic fields index into. The
manager module owns one cache per target system.
"""
