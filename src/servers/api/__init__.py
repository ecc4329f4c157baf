"""REST API server exposing the relational and graph stores."""

from .api_server import create_app

__all__ = ["create_app"]
