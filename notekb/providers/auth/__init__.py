"""Authorization providers for the content source."""

from notekb.providers.auth.static_token_provider import StaticTokenAuthProvider

__all__ = ["StaticTokenAuthProvider"]
