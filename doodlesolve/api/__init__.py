"""HTTP interface for DoodleSolve."""

from .server import create_app

__all__ = ["create_app"]
