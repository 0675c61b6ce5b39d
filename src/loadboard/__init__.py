"""
Loadboard: load management service for a logistics marketplace.

Profiles, driver fleet registration, the load lifecycle state machine and
dashboard statistics over a relational store.
"""

__version__ = "0.1.0"
