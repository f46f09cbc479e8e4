"""
db/ - Database Layer
====================
Handles PostgreSQL connections, the demo schema, and the project's error types.
This layer is the lowest in the architecture and has no dependencies on other layers.
"""
