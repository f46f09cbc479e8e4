"""
models/ - Domain Models
=======================
Dataclasses built from mapped stored-function results.
"""
