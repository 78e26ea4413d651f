"""
AccountHub Backend — CSRF Token Manager
=========================================

What:  Issues and verifies anti-forgery tokens for forms that keep CSRF protection on.
Why:   Browser-facing forms must prove the submission came from a page we served.
       Token-less API clients (the group API) bind with protection disabled.
How:   Token = "<issued-at>.<hex HMAC-SHA256(secret, intention:issued-at)>".
       A token is valid for one intention (form name) and `ttl` seconds.
"""

import hashlib
import hmac
import logging
import time
from typing import Optional

logger = logging.getLogger(__name__)


class CsrfTokenManager:
    """Stateless HMAC token issuer; no server-side session storage needed."""

    def __init__(self, secret: str, ttl: int = 3600):
        self._secret = secret.encode("utf-8")
        self.ttl = ttl

    def _sign(self, intention: str, issued_at: int) -> str:
        message = f"{intention}:{issued_at}".encode("utf-8")
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()

    def generate_token(self, intention: str, now: Optional[float] = None) -> str:
        """Return a fresh token bound to `intention`."""
        issued_at = int(now if now is not None else time.time())
        return f"{issued_at}.{self._sign(intention, issued_at)}"

    def is_token_valid(self, intention: str, token: Optional[str], now: Optional[float] = None) -> bool:
        """
        Check a submitted token.

        Returns False for missing, malformed, forged, foreign-intention,
        and expired tokens.
        """
        if not token or "." not in token:
            return False

        issued_part, signature = token.split(".", 1)
        try:
            issued_at = int(issued_part)
        except ValueError:
            return False

        current = now if now is not None else time.time()
        if current - issued_at > self.ttl or issued_at - current > 60:
            logger.debug("CSRF token for '%s' expired or issued in the future", intention)
            return False

        # compare_digest: constant time, no timing oracle on the signature
        return hmac.compare_digest(signature, self._sign(intention, issued_at))
