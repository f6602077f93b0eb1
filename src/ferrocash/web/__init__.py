"""HTTP API for FerroCash."""

from ferrocash.web.app import create_app

__all__ = ["create_app"]
