"""Cluster state storage layer.

This package holds the storage contract, its four backends,
and the selector that turns configuration into a live store.
"""
