"""HTTP boundary of the lesson import service."""

from lesson_import.api.app import create_app
from lesson_import.api.auth import Caller, IdentityProvider, StaticTokenIdentityProvider

__all__ = ["Caller", "IdentityProvider", "StaticTokenIdentityProvider", "create_app"]
