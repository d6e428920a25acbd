"""REST API package."""

from .app import create_api

__all__ = ["create_api"]
