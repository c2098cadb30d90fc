"""Application composition layer for the command-line client.

The runtime in this package wires adapters, use cases and view models into a
runnable orchestrator without placing business logic in the entry point.
"""
