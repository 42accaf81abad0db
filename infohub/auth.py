"""Bearer-token gate in front of the editor API."""

from __future__ import annotations

import hmac
import logging

logger = logging.getLogger(__name__)

PROTECTED_PREFIXES = ("/api/", "/preview")


class TokenAuth:
    def __init__(self, token: str | None):
        self.token = token or None

    @property
    def enabled(self) -> bool:
        return self.token is not None

    def warn_if_open(self) -> None:
        if not self.enabled:
            logger.warning("No API token configured; the editor API accepts every request")

    def requires_auth(self, path: str) -> bool:
        return any(path == prefix.rstrip("/") or path.startswith(prefix) for prefix in PROTECTED_PREFIXES)

    def is_authorized(self, authorization: str | None) -> bool:
        if self.token is None:
            return True
        if not authorization:
            return False
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() != "bearer":
            return False
        return hmac.compare_digest(credentials.strip().encode("utf-8"), self.token.encode("utf-8"))
