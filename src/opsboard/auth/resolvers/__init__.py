"""Concrete token resolvers."""

from opsboard.auth.resolvers.env import TOKEN_ENV, EnvTokenResolver
from opsboard.auth.resolvers.static import StaticTokenResolver

__all__ = ["TOKEN_ENV", "EnvTokenResolver", "StaticTokenResolver"]
