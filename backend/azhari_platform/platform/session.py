"""
Authenticated session handling.

A Session is an explicit value built from the hosted auth provider's access
token plus the user's profile row, and passed into the evaluator and resolver.

Lifecycle:
- created by SessionService.authenticate() on a verified access token
- replaced by SessionService.refresh() when the client renews its token
- destroyed by SessionService.sign_out(), which revokes the session id in
  Redis until the token would have expired anyway

Key schema:
- session:revoked:{session_id} -> "1" (TTL = remaining token lifetime)
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import jwt
import redis
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DbSession

from azhari_platform.config import settings
from azhari_platform.models.profile import Profile, UserRole
from azhari_platform.platform.errors import (
    AuthenticationError,
    ConfigurationError,
    UpstreamUnavailableError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    """The authenticated caller."""

    user_id: str
    role: str
    is_banned: bool = False
    session_id: Optional[str] = None
    email: Optional[str] = None
    expires_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


class SessionRevocationStore:
    """
    Redis-backed set of signed-out session ids.

    Redis failures are logged and treated as "not revoked" so that a Redis
    outage does not lock every user out; the token's own expiry still applies.
    """

    def __init__(self, redis_client: redis.Redis):
        self._redis = redis_client

    @staticmethod
    def _key(session_id: str) -> str:
        return f"session:revoked:{session_id}"

    def revoke(self, session_id: str, expires_at: Optional[datetime]) -> None:
        ttl = 86400
        if expires_at is not None:
            ttl = max(int(expires_at.timestamp() - time.time()), 1)
        try:
            self._redis.setex(self._key(session_id), ttl, "1")
            logger.info("Revoked session", extra={"session_id": session_id, "ttl_seconds": ttl})
        except redis.RedisError:
            logger.warning(
                "Failed to revoke session in Redis",
                extra={"session_id": session_id},
                exc_info=True,
            )

    def is_revoked(self, session_id: str) -> bool:
        try:
            return bool(self._redis.exists(self._key(session_id)))
        except redis.RedisError:
            logger.warning(
                "Failed to check session revocation in Redis",
                extra={"session_id": session_id},
                exc_info=True,
            )
            return False


_revocation_store: Optional[SessionRevocationStore] = None


def get_revocation_store() -> SessionRevocationStore:
    global _revocation_store
    if _revocation_store is None:
        _revocation_store = SessionRevocationStore(redis.Redis.from_url(settings.REDIS_URL))
    return _revocation_store


class SessionService:
    """Builds, refreshes and destroys Session values."""

    ALGORITHM = "HS256"

    def __init__(
        self,
        db_session: DbSession,
        revocation_store: SessionRevocationStore,
        jwt_secret: Optional[str] = None,
        audience: Optional[str] = None,
    ):
        self.db = db_session
        self.revocations = revocation_store
        self.jwt_secret = jwt_secret or settings.SUPABASE_JWT_SECRET
        self.audience = audience or settings.SUPABASE_JWT_AUDIENCE

    def _decode(self, access_token: str) -> dict:
        if not self.jwt_secret:
            raise ConfigurationError("SUPABASE_JWT_SECRET is not configured")
        try:
            return jwt.decode(
                access_token,
                self.jwt_secret,
                algorithms=[self.ALGORITHM],
                audience=self.audience,
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Session has expired")
        except jwt.InvalidTokenError as e:
            logger.info("Rejected access token", extra={"error": str(e)})
            raise AuthenticationError("Invalid access token")

    def authenticate(self, access_token: str) -> Session:
        """Verify the access token and attach the profile's role and ban flag."""
        claims = self._decode(access_token)
        user_id = claims.get("sub")
        if not user_id:
            raise AuthenticationError("Invalid access token")

        session_id = claims.get("session_id")
        if session_id and self.revocations.is_revoked(session_id):
            raise AuthenticationError("Session has been signed out")

        try:
            profile = self.db.query(Profile).filter(Profile.id == user_id).first()
        except SQLAlchemyError as e:
            logger.error("Profile lookup failed", extra={"user_id": user_id, "error": str(e)})
            raise UpstreamUnavailableError("Could not load user profile", upstream="database") from e

        exp = claims.get("exp")
        return Session(
            user_id=user_id,
            role=(profile.role if profile and profile.role else UserRole.STUDENT.value),
            is_banned=bool(profile.is_banned) if profile else False,
            session_id=session_id,
            email=claims.get("email"),
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc) if exp else None,
        )

    def refresh(self, current: Session, new_access_token: str) -> Session:
        """Rebuild the session from a renewed token for the same user."""
        renewed = self.authenticate(new_access_token)
        if renewed.user_id != current.user_id:
            raise AuthenticationError("Renewed token belongs to a different user")
        return renewed

    def sign_out(self, current: Session) -> None:
        if current.session_id:
            self.revocations.revoke(current.session_id, current.expires_at)
        logger.info("User signed out", extra={"user_id": current.user_id})
