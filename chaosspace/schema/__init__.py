"""
Action-space encoder.

A fault configuration record (chaosspace.schema.record.Record) declares its
fields explicitly. The deriver turns a record type into a Node tree of integer
domains; the codec turns a populated tree back into a validated record, and a
record into a populated tree; the vectors module flattens a tree into an
ordered list of dimensions.
"""
