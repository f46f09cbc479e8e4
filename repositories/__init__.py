"""
repositories/ - Data Access Layer
==================================
Calls PostgreSQL stored functions and maps what they return.
Repositories receive raw rows from the database and return dicts,
named tuples, parsed JSON, or domain model objects.
"""
