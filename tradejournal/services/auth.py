"""Journal login helpers: bcrypt passwords, signed session tokens, optional TOTP."""

from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt
import pyotp

from tradejournal.config import settings
from tradejournal.models.user import User

TOTP_ISSUER = "Trade Journal"


def _secret_bytes(password: str) -> bytes:
    # bcrypt only looks at the first 72 bytes
    return password.encode("utf-8")[:72]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_secret_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(_secret_bytes(plain), hashed.encode("utf-8"))


def issue_token(user: User) -> str:
    """Bearer token naming the journal owner by id and email."""
    now = datetime.now(timezone.utc)
    claims = {
        "sub": user.email,
        "uid": user.id,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_expire_minutes),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def read_token(token: str) -> dict | None:
    """Claims of a valid, unexpired token; None otherwise."""
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    if not isinstance(claims.get("uid"), int) or not claims.get("sub"):
        return None
    return claims


def second_factor_ok(user: User, code: str | None) -> bool:
    """Users without a TOTP secret need no code."""
    if not user.totp_secret:
        return True
    if not code:
        return False
    return pyotp.TOTP(user.totp_secret).verify(code.strip(), valid_window=1)


def new_totp_secret() -> str:
    return pyotp.random_base32()


def totp_uri(secret: str, email: str) -> str:
    return pyotp.TOTP(secret).provisioning_uri(name=email, issuer_name=TOTP_ISSUER)
