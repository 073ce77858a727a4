"""Verify caller JWTs (HS256, shared secret) at the API boundary."""

from dataclasses import dataclass

import jwt

from services.errors import AuthenticationError, ConfigurationError

# Accept tokens issued by a server whose clock runs slightly ahead.
CLOCK_SKEW_SECONDS = 60


@dataclass(frozen=True)
class Caller:
    user_id: str


def bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.strip():
        raise AuthenticationError("Not authenticated")
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Not authenticated")
    return token.strip()


def authenticate(
    authorization: str | None,
    *,
    secret: str,
    audience: str | None = None,
) -> Caller:
    """Decode the bearer token and return the caller it identifies."""
    if not secret:
        raise ConfigurationError("Auth secret not configured (AUTH_JWT_SECRET)")
    token = bearer_token(authorization)
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=["HS256"],
            audience=audience,
            leeway=CLOCK_SKEW_SECONDS,
            options={"require": ["exp", "sub"], "verify_aud": audience is not None},
        )
    except jwt.PyJWTError as exc:
        raise AuthenticationError("User authentication failed") from exc
    return Caller(user_id=str(claims["sub"]))
