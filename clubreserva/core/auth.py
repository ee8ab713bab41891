"""Caller identity tokens: JWTs minted by the identity provider, verified here."""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from clubreserva.core.config import settings


def create_access_token(subject: str, extra: dict | None = None) -> str:
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    payload = {"sub": subject, "exp": expire, "type": "access"}
    if extra:
        payload.update(extra)
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT. Raises JWTError on failure."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


def user_id_from_token(token: str) -> int:
    """Return the user id carried by an access token.

    Raises JWTError for anything that is not a valid access token.
    """
    payload = decode_token(token)
    if payload.get("type") != "access":
        raise JWTError("Invalid token type")
    try:
        return int(payload["sub"])
    except (KeyError, ValueError) as exc:
        raise JWTError("Invalid subject") from exc
