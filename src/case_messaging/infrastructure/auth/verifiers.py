"""Bearer token verification.

Both verifiers check the signature, expiry and, when configured, the
audience and issuer, then turn the claims into a ``Principal``.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any

import jwt
from jwt import PyJWKClient

from case_messaging.application.dto.principal import Principal
from case_messaging.infrastructure.auth.claims import principal_from_claims

logger = logging.getLogger(__name__)

_REQUIRED_CLAIMS = ["sub"]


class _ClaimsVerifier:
    def __init__(self, *, audience: str | None = None, issuer: str | None = None) -> None:
        self._audience = audience
        self._issuer = issuer

    def _decode(self, token: str, key: Any, algorithms: list[str]) -> dict[str, Any]:
        return jwt.decode(
            token,
            key,
            algorithms=algorithms,
            audience=self._audience,
            issuer=self._issuer,
            options={
                "require": _REQUIRED_CLAIMS,
                "verify_aud": self._audience is not None,
            },
        )


class HS256Verifier(_ClaimsVerifier):
    """Tokens signed with a secret shared with the identity service."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        *,
        audience: str | None = None,
        issuer: str | None = None,
    ) -> None:
        super().__init__(audience=audience, issuer=issuer)
        if not secret:
            raise RuntimeError("JWT_SECRET must be set when JWT_VERIFY_MODE=hs256")
        self._secret = secret
        self._algorithm = algorithm

    async def verify(self, token: str) -> Principal:
        return principal_from_claims(self._decode(token, self._secret, [self._algorithm]))


class JWKSVerifier(_ClaimsVerifier):
    """Tokens signed with a key published on a JWKS endpoint."""

    def __init__(
        self,
        jwks_url: str,
        *,
        audience: str | None = None,
        issuer: str | None = None,
    ) -> None:
        super().__init__(audience=audience, issuer=issuer)
        self._jwks_url = jwks_url
        self._jwk_client = PyJWKClient(jwks_url, cache_keys=True)

    async def verify(self, token: str) -> Principal:
        # PyJWKClient fetches the key set with blocking I/O
        signing_key = await asyncio.to_thread(self._jwk_client.get_signing_key_from_jwt, token)
        payload = self._decode(token, signing_key.key, ["RS256", "ES256"])
        logger.debug("Token for subject %s verified against %s", payload["sub"], self._jwks_url)
        return principal_from_claims(payload)
