"""
services/ - Service Layer
=========================
Work on top of the repositories, such as exporting function results.
"""
