"""Test fixtures for the envelope client.

This package provides reusable test fixtures:
- transport: Mock transports and envelope body helpers
- sandbox: Clients wired to the sandbox peer application
"""
