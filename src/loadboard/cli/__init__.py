"""Loadboard command-line interface."""
