"""Use-case layer for orchestrating spoofing, search, and bookmark workflows.

Each module coordinates domain objects and ports without performing transport
I/O directly, preserving MVVM + Hexagonal boundaries.
"""
