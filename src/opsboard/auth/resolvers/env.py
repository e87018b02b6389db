"""Environment token resolver."""

from __future__ import annotations

import os

from opsboard.auth.base import TokenResolver
from opsboard.contracts.exceptions import AuthenticationError

TOKEN_ENV = "OPSBOARD_TOKEN"


class EnvTokenResolver(TokenResolver):
    def __init__(self, variable: str = TOKEN_ENV) -> None:
        self._variable = variable

    async def resolve(self) -> str:
        token = (os.getenv(self._variable) or "").strip()
        if not token:
            raise AuthenticationError(f"{self._variable} is not set or empty")
        return token
