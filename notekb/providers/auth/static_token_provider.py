"""Bearer-token authorization provider.

Hands out an ``Authorization: Bearer <token>`` header built from a token
acquired elsewhere (``az account get-access-token``, an MSAL device-code
flow, Graph Explorer).  Refreshing an expired token is the job of whoever
exported it; a 401 from Graph surfaces as a ``SourceFetchError``.
"""

from __future__ import annotations

from notekb.interfaces.auth_provider import IAuthProvider
from notekb.utils.errors import ConfigurationError


class StaticTokenAuthProvider(IAuthProvider):
    """Auth provider that always returns the same bearer token."""

    def __init__(self, access_token: str) -> None:
        token = (access_token or "").strip()
        if not token:
            raise ConfigurationError(
                message="GRAPH_ACCESS_TOKEN is required to read OneNote content",
                provider_name=self.get_provider_name(),
            )
        self._token = token

    async def get_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"}

    def get_provider_name(self) -> str:
        return "static_token"
