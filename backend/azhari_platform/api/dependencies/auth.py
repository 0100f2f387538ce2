"""
Session dependencies.

get_current_session turns the bearer token into a Session value;
require_roles gates a route on the caller's role. A banned caller is
rejected by every protected route.
"""

import logging
from typing import Callable

from fastapi import Depends, Request

from azhari_platform.database.session import get_db_session
from azhari_platform.platform.errors import AccessDeniedError, AuthenticationError
from azhari_platform.platform.session import Session, SessionService, get_revocation_store

logger = logging.getLogger(__name__)


def get_session_service(db_session=Depends(get_db_session)) -> SessionService:
    return SessionService(db_session, get_revocation_store())


def extract_bearer_token(request: Request) -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError()
    return token.strip()


def get_current_session(
    request: Request,
    session_service: SessionService = Depends(get_session_service),
) -> Session:
    session = session_service.authenticate(extract_bearer_token(request))
    request.state.user_id = session.user_id
    return session


def require_roles(*roles: str) -> Callable:
    """
    Dependency factory: the caller must hold one of roles and not be banned.

    Use on a route: Depends(require_roles("admin"))
    """

    def _check(session: Session = Depends(get_current_session)) -> Session:
        if session.is_banned:
            raise AccessDeniedError("Your account has been suspended", reason="banned")
        if roles and session.role not in roles:
            logger.info(
                "Role check failed",
                extra={"user_id": session.user_id, "role": session.role, "required": list(roles)},
            )
            raise AccessDeniedError("Insufficient role", reason="role")
        return session

    return _check


require_active_user = require_roles()
require_admin = require_roles("admin")
