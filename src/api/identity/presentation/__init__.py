"""Presentation layer for the identity bounded context."""

from identity.presentation.routes import auth_router, router

__all__ = ["auth_router", "router"]
