"""
Identity verifier implementations.

Two strategies are supported:

- SecretTokenVerifier: HS256 tokens signed with the Supabase project's
  shared JWT secret. Verification is local.
- JWKSTokenVerifier: RS256/ES256 tokens verified against the provider's
  published JSON Web Key Set (Supabase asymmetric keys, or Firebase via
  https://www.googleapis.com/service_accounts/v1/jwk/securetoken@system.gserviceaccount.com).
  Keys are fetched over HTTP and cached.
"""

import logging
import time
from typing import Any, Optional

import httpx
import jwt

from shared.config import Settings

from .exceptions import TokenVerificationError, VerifierUnavailableError
from .models import Claims

logger = logging.getLogger(__name__)

# PyJWT exception -> provider-style error code, most specific first
_ERROR_CODES: tuple[tuple[type[Exception], str], ...] = (
    (jwt.ExpiredSignatureError, "token_expired"),
    (jwt.ImmatureSignatureError, "token_not_yet_valid"),
    (jwt.InvalidAudienceError, "invalid_audience"),
    (jwt.InvalidIssuerError, "invalid_issuer"),
    (jwt.InvalidSignatureError, "invalid_signature"),
    (jwt.MissingRequiredClaimError, "missing_claim"),
    (jwt.InvalidAlgorithmError, "invalid_algorithm"),
    (jwt.DecodeError, "malformed_token"),
)


def _error_code(error: jwt.PyJWTError) -> str:
    for exc_type, code in _ERROR_CODES:
        if isinstance(error, exc_type):
            return code
    return "invalid_token"


class _JWTVerifierBase:
    """Shared claim validation for JWT-based verifiers."""

    algorithms: list[str] = []

    def __init__(self, audience: str = "authenticated", issuer: str = "", leeway: int = 10):
        self.audience = audience
        self.issuer = issuer
        self.leeway = leeway

    def _decode(self, token: str, key: Any) -> Claims:
        try:
            payload = jwt.decode(
                token,
                key,
                algorithms=self.algorithms,
                audience=self.audience or None,
                issuer=self.issuer or None,
                leeway=self.leeway,
                options={
                    "require": ["exp"],
                    "verify_aud": bool(self.audience),
                },
            )
        except jwt.PyJWTError as e:
            raise TokenVerificationError(_error_code(e), str(e)) from e

        logger.debug(
            "JWT verified",
            extra={"user_id": payload.get("sub"), "exp": payload.get("exp")},
        )
        return Claims.from_payload(payload)


class SecretTokenVerifier(_JWTVerifierBase):
    """
    Verifies HS256 tokens with a shared secret.

    This is how Supabase signs access tokens by default.
    """

    algorithms = ["HS256"]

    def __init__(self, secret: str, audience: str = "authenticated", issuer: str = "", leeway: int = 10):
        super().__init__(audience=audience, issuer=issuer, leeway=leeway)
        self._secret = secret

    @property
    def mode(self) -> str:
        return "secret"

    @property
    def is_configured(self) -> bool:
        return bool(self._secret)

    async def verify(self, token: str) -> Claims:
        if not self._secret:
            raise VerifierUnavailableError()
        return self._decode(token, self._secret)

    async def close(self) -> None:
        pass


class JWKSCache:
    """
    Fetches and caches a JSON Web Key Set.

    Keys are refreshed when the cache is older than ``cache_ttl`` seconds,
    and once more when a token names a key ID the cache has not seen
    (key rotation).
    """

    def __init__(self, jwks_url: str, cache_ttl: int = 3600, timeout: float = 10.0):
        self.jwks_url = jwks_url
        self.cache_ttl = cache_ttl
        self._keys: dict[str, jwt.PyJWK] = {}
        self._last_refresh: Optional[float] = None
        self._http_client = httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    @property
    def key_ids(self) -> list[str]:
        return list(self._keys)

    async def get_signing_key(self, kid: str) -> jwt.PyJWK:
        """
        Get the signing key for a key ID.

        Raises:
            TokenVerificationError: If the key set cannot be fetched or
                the key ID is still unknown after a refresh
        """
        refreshed = False
        if self._needs_refresh():
            await self.refresh_keys()
            refreshed = True

        key = self._keys.get(kid)
        if key is None and not refreshed:
            logger.warning(
                f"Key ID '{kid}' not found in cache, refreshing JWKS",
                extra={"kid": kid, "cached_kids": self.key_ids},
            )
            await self.refresh_keys()
            key = self._keys.get(kid)

        if key is None:
            raise TokenVerificationError("unknown_key", f"Key ID '{kid}' not found in JWKS")
        return key

    async def refresh_keys(self) -> None:
        """Fetch the key set and replace the cache."""
        try:
            response = await self._http_client.get(self.jwks_url)
            response.raise_for_status()
            keys_list = response.json().get("keys", [])
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to fetch JWKS from {self.jwks_url}: {e}")
            raise TokenVerificationError("jwks_fetch_failed", f"Could not fetch signing keys: {e}") from e

        new_keys: dict[str, jwt.PyJWK] = {}
        for key_data in keys_list:
            kid = key_data.get("kid")
            if not kid:
                logger.warning("JWKS key missing 'kid', skipping")
                continue
            try:
                new_keys[kid] = jwt.PyJWK(key_data)
            except jwt.PyJWTError as e:
                logger.warning(f"Skipping unusable JWKS key {kid}: {e}")

        self._keys = new_keys
        self._last_refresh = time.monotonic()
        logger.info(f"JWKS cache refreshed: {len(new_keys)} keys")

    def _needs_refresh(self) -> bool:
        if self._last_refresh is None:
            return True
        return time.monotonic() - self._last_refresh >= self.cache_ttl

    async def close(self) -> None:
        await self._http_client.aclose()


class JWKSTokenVerifier(_JWTVerifierBase):
    """Verifies RS256/ES256 tokens against a provider's published keys."""

    algorithms = ["RS256", "ES256"]

    def __init__(
        self,
        jwks_cache: Optional[JWKSCache],
        audience: str = "authenticated",
        issuer: str = "",
        leeway: int = 10,
    ):
        super().__init__(audience=audience, issuer=issuer, leeway=leeway)
        self.jwks_cache = jwks_cache

    @property
    def mode(self) -> str:
        return "jwks"

    @property
    def is_configured(self) -> bool:
        return self.jwks_cache is not None

    async def verify(self, token: str) -> Claims:
        if self.jwks_cache is None:
            raise VerifierUnavailableError()

        try:
            header = jwt.get_unverified_header(token)
        except jwt.PyJWTError as e:
            raise TokenVerificationError("malformed_token", str(e)) from e

        kid = header.get("kid")
        if not kid:
            raise TokenVerificationError("malformed_token", "JWT header missing 'kid' (key ID)")

        signing_key = await self.jwks_cache.get_signing_key(kid)
        return self._decode(token, signing_key.key)

    async def close(self) -> None:
        if self.jwks_cache is not None:
            await self.jwks_cache.close()


def build_identity_verifier(settings: Settings) -> SecretTokenVerifier | JWKSTokenVerifier:
    """Create the verifier selected by ``settings.token_verification``."""
    if settings.token_verification == "jwks":
        cache = None
        if settings.jwks_url:
            cache = JWKSCache(
                settings.jwks_url,
                cache_ttl=settings.jwks_cache_ttl_seconds,
                timeout=settings.auth_timeout_seconds,
            )
        return JWKSTokenVerifier(
            cache,
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            leeway=settings.jwt_leeway_seconds,
        )

    return SecretTokenVerifier(
        settings.supabase_jwt_secret,
        audience=settings.jwt_audience,
        issuer=settings.jwt_issuer,
        leeway=settings.jwt_leeway_seconds,
    )
