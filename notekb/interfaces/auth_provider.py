"""Abstract base class for request-authorization providers.

The content source needs an ``Authorization`` header for every Graph call
but has no business knowing where the credential comes from.  Token
acquisition and refresh (device-code flow, client credentials, az cli)
live outside this project; an implementation of this interface only hands
out ready-to-send headers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementation: StaticTokenAuthProvider (notekb/providers/auth/)
class IAuthProvider(ABC):
    """Contract for objects that supply HTTP authorization headers."""

    @abstractmethod
    async def get_headers(self) -> dict[str, str]:
        """Return the headers to attach to an outgoing request.

        Raises
        ------
        notekb.utils.errors.ConfigurationError
            If no usable credential is available.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this auth provider."""
