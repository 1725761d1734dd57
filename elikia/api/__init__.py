"""
HTTP API.
"""

from elikia.api.app import create_app

__all__ = ["create_app"]
