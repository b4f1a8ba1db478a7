"""
REST API for WikiLoop datasets.

Exposes the epoch-versioned dataset store via read-only HTTP endpoints
for the explorer front end.
"""

__version__ = "1.0.0"
