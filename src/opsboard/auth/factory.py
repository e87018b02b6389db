"""Token resolver factory."""

from __future__ import annotations

from opsboard.auth.base import TokenResolver
from opsboard.auth.resolvers.env import EnvTokenResolver
from opsboard.auth.resolvers.static import StaticTokenResolver
from opsboard.contracts.config import OpsBoardConfig
from opsboard.contracts.exceptions import ConfigError

RESOLVERS: dict[str, type[TokenResolver]] = {
    "env": EnvTokenResolver,
    "token": StaticTokenResolver,
}


def create_token_resolver(config: OpsBoardConfig) -> TokenResolver:
    auth_mode = config.auth
    if auth_mode not in RESOLVERS:
        raise ConfigError(f"Unknown auth mode: {auth_mode}")
    if auth_mode == "env":
        return EnvTokenResolver()
    return StaticTokenResolver(token=config.token or "")
