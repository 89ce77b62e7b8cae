"""Core: configuration, domain models and orchestration.

Knows nothing about the terminal; adapters do the I/O.
"""
