"""Bearer-token verification."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from jose import JWTError, jwt

from app.core.config import Settings, settings
from app.core.errors import AuthenticationFailed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """Caller identity taken from a verified token.

    ``role_claim`` is informational only; privileged checks read the role
    from the users table.
    """

    external_id: str
    email: str | None = None
    role_claim: str | None = None


def decode_token(token: str, config: Settings = settings) -> Identity:
    if not config.auth_secret_key:
        logger.error("AUTH_SECRET_KEY is missing in environment variables")
        raise AuthenticationFailed("Server configuration error")

    options = {"verify_aud": config.auth_audience is not None}
    try:
        claims = jwt.decode(
            token,
            config.auth_secret_key,
            algorithms=config.auth_algorithms,
            audience=config.auth_audience,
            issuer=config.auth_issuer,
            options=options,
        )
    except JWTError as exc:
        logger.warning("Token verification failed: %s", exc)
        raise AuthenticationFailed("Invalid token") from exc

    subject = claims.get("sub")
    if not subject:
        raise AuthenticationFailed("Token has no subject")
    return Identity(
        external_id=str(subject),
        email=claims.get("email"),
        role_claim=claims.get("role"),
    )
