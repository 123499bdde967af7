"""
Token Codec

Signs and verifies access/refresh JWTs. The two token kinds use independent
secrets and algorithms so a leaked access key cannot forge refresh tokens.
"""

import secrets
from datetime import UTC, datetime
from typing import Callable, Optional
from uuid import UUID

from jose import JWTError, jwt
from pydantic import BaseModel

Clock = Callable[[], datetime]


class InvalidTokenError(Exception):
    """Signature or structure check failed"""


class TokenExpiredError(Exception):
    """Signature verified but the token is past its expiry"""


class IssuedToken(BaseModel):
    """A freshly signed token with its lifetime (epoch seconds)"""

    token: str
    issued_at: int
    expires_at: int


class TokenClaims(BaseModel):
    """Claims of a token whose signature and expiry were verified"""

    subject_id: UUID
    issued_at: int
    expires_at: int


class UnverifiedClaims(BaseModel):
    """
    Claims read WITHOUT signature verification.

    The subject is kept as the raw string: it is a hint for locating a
    session to clean up, never an authenticated identity.
    """

    subject: Optional[str] = None
    expires_at: Optional[int] = None


def decode_unverified(token: str) -> UnverifiedClaims:
    """
    Read the claims of a token without verifying it.

    Only used to find the session of an already-expired refresh token so it
    can be revoked. Must never be used to authorize an action.
    """
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError as exc:
        raise InvalidTokenError("Malformed token") from exc
    return UnverifiedClaims(subject=claims.get("sub"), expires_at=claims.get("exp"))


class TokenCodec:
    """
    Issues and verifies access and refresh tokens.

    Payload: {"sub": <user id>, "iat": <epoch>, "exp": <epoch>, "jti": <random>}
    """

    def __init__(
        self,
        access_secret: str,
        access_expiry: int,
        refresh_secret: str,
        refresh_expiry: int,
        access_algorithm: str = "HS256",
        refresh_algorithm: str = "HS512",
        clock: Optional[Clock] = None,
    ):
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh secrets must differ")
        self.access_secret = access_secret
        self.access_expiry = int(access_expiry)
        self.access_algorithm = access_algorithm
        self.refresh_secret = refresh_secret
        self.refresh_expiry = int(refresh_expiry)
        self.refresh_algorithm = refresh_algorithm
        self._clock = clock or (lambda: datetime.now(UTC))

    @classmethod
    def from_config(cls, config, clock: Optional[Clock] = None) -> "TokenCodec":
        return cls(
            access_secret=config.ACCESS_SECRET,
            access_expiry=config.ACCESS_EXPIRY,
            refresh_secret=config.REFRESH_SECRET,
            refresh_expiry=config.REFRESH_EXPIRY,
            access_algorithm=config.ACCESS_ALGORITHM,
            refresh_algorithm=config.REFRESH_ALGORITHM,
            clock=clock,
        )

    def now(self) -> int:
        """Current time in epoch seconds"""
        return int(self._clock().timestamp())

    def _issue(self, subject_id: UUID, secret: str, algorithm: str, ttl: int) -> IssuedToken:
        issued_at = self.now()
        expires_at = issued_at + ttl
        payload = {
            "sub": str(subject_id),
            "iat": issued_at,
            "exp": expires_at,
            "jti": secrets.token_hex(8),
        }
        token = jwt.encode(payload, secret, algorithm=algorithm)
        return IssuedToken(token=token, issued_at=issued_at, expires_at=expires_at)

    def issue_access(self, subject_id: UUID) -> IssuedToken:
        """Sign a short-lived access token"""
        return self._issue(
            subject_id, self.access_secret, self.access_algorithm, self.access_expiry
        )

    def issue_refresh(self, subject_id: UUID) -> IssuedToken:
        """Sign a long-lived refresh token"""
        return self._issue(
            subject_id, self.refresh_secret, self.refresh_algorithm, self.refresh_expiry
        )

    def verify(self, token: str, secret: str, algorithm: str) -> TokenClaims:
        """
        Verify signature, then expiry against the codec clock.

        Raises:
            InvalidTokenError: bad signature, wrong algorithm or malformed claims
            TokenExpiredError: signature valid, now >= exp
        """
        try:
            payload = jwt.decode(
                token, secret, algorithms=[algorithm], options={"verify_exp": False}
            )
        except JWTError as exc:
            raise InvalidTokenError(str(exc)) from exc

        try:
            claims = TokenClaims(
                subject_id=UUID(payload["sub"]),
                issued_at=int(payload["iat"]),
                expires_at=int(payload["exp"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidTokenError("Malformed token claims") from exc

        if self.now() >= claims.expires_at:
            raise TokenExpiredError("Token has expired")
        return claims

    def verify_access(self, token: str) -> TokenClaims:
        return self.verify(token, self.access_secret, self.access_algorithm)

    def verify_refresh(self, token: str) -> TokenClaims:
        return self.verify(token, self.refresh_secret, self.refresh_algorithm)
