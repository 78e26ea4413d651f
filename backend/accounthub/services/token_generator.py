"""Random tokens for account confirmation links."""

import secrets


class TokenGenerator:
    """URL-safe tokens from 32 random bytes (43 characters, no padding)."""

    def generate_token(self) -> str:
        return secrets.token_urlsafe(32)
