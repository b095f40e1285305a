from datetime import datetime, timedelta, timezone

from jose import jwt, JWTError

from core.config import settings
from core.exceptions import AuthError


def decode_identity_token(token: str) -> dict:
    """Verify a token issued by the identity provider and return its claims."""
    try:
        claims = jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            audience=settings.AUTH_JWT_AUDIENCE,
            issuer=settings.AUTH_JWT_ISSUER,
            options={"verify_aud": settings.AUTH_JWT_AUDIENCE is not None},
        )
    except JWTError as e:
        raise AuthError(details={"reason": str(e)})

    if not claims.get("sub"):
        raise AuthError(details={"reason": "token has no subject"})
    return claims


def create_identity_token(external_id: str, expire_minutes: int = 60, **claims) -> str:
    """Sign a token the way the identity provider does (local development and tests)."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=expire_minutes)
    payload = {"sub": external_id, "exp": expire, **claims}
    if settings.AUTH_JWT_AUDIENCE:
        payload.setdefault("aud", settings.AUTH_JWT_AUDIENCE)
    if settings.AUTH_JWT_ISSUER:
        payload.setdefault("iss", settings.AUTH_JWT_ISSUER)
    return jwt.encode(payload, settings.AUTH_JWT_SECRET, algorithm=settings.AUTH_JWT_ALGORITHM)
