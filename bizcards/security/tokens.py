"""Stateless session tokens (signed JWTs)."""

from dataclasses import dataclass
from datetime import timedelta

from jose import JWTError, jwt

from bizcards.config import get_settings
from bizcards.models.mixins import utcnow


@dataclass(frozen=True)
class TokenClaims:
    """Identity snapshot embedded in a token at issuance."""

    subject_id: int
    is_business: bool
    is_admin: bool


class TokenProvider:
    """Issues and verifies session tokens.

    Claims are a snapshot: later changes to the account (role, block) are not
    visible through an already-issued token.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expires_minutes: int = 60):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self.secret = secret
        self.algorithm = algorithm
        self.expires_minutes = expires_minutes

    def issue(self, user) -> str:
        """Sign a token for the user. Signing errors propagate."""
        now = utcnow()
        payload = {
            "sub": str(user.id),
            "is_business": bool(user.is_business),
            "is_admin": bool(user.is_admin),
            "iat": now,
            "exp": now + timedelta(minutes=self.expires_minutes),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims | None:
        """Return the claims of a valid token, or None for any failure."""
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError:
            return None
        return _claims_from_payload(payload)


def _claims_from_payload(payload: dict) -> TokenClaims | None:
    subject = payload.get("sub")
    is_business = payload.get("is_business")
    is_admin = payload.get("is_admin")
    if not isinstance(subject, str) or not subject.isdigit():
        return None
    if not isinstance(is_business, bool) or not isinstance(is_admin, bool):
        return None
    return TokenClaims(subject_id=int(subject), is_business=is_business, is_admin=is_admin)


def get_token_provider() -> TokenProvider:
    """Token provider built from application settings."""
    settings = get_settings()
    return TokenProvider(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expires_minutes=settings.jwt_expiration_minutes,
    )
