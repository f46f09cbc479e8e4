"""
mapping/ - Row Mapping
======================
Converts cursor rows into dictionaries, named tuples, or parsed JSON,
and documents the available mapping modes.
"""
