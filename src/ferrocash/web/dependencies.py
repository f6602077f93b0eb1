"""
Dependency injection.

The FerroCash instance lives on ``app.state``; routes receive it through Depends.
"""

from fastapi import Request

from ferrocash.client import FerroCash


def get_cash(request: Request) -> FerroCash:
    """Return the application's FerroCash instance."""
    return request.app.state.cash
