"""Auth module public exports."""

from opsboard.auth.base import TokenResolver
from opsboard.auth.factory import create_token_resolver

__all__ = ["TokenResolver", "create_token_resolver"]
