"""
API Dependencies

FastAPI dependency injection for authentication, staff authorization and
the session service.

Security: JWT tokens are verified cryptographically using Supabase JWKS (ES256)
with HS256 fallback via the JWT secret. Never decode without verification.
"""

import logging
from typing import Annotated, AsyncGenerator, Optional
from uuid import UUID

import jwt
from jwt import PyJWKClient
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from cowork.config.settings import get_settings
from cowork.domain.models import STAFF_ROLES, UserRole
from cowork.domain.sessions import StaffIdentity
from cowork.infrastructure.db.dependencies import (
    SessionDep,
    SessionRepoDep,
    SubscriptionRepoDep,
    UserRepoDep,
)
from cowork.infrastructure.notifications.webhook_notifier import (
    SessionWebhookNotifier,
    get_session_notifier,
)
from cowork.infrastructure.services.session_service import SessionService


logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

# Cached JWKS client; PyJWKClient caches keys internally.
_jwks_client: Optional[PyJWKClient] = None


def _get_jwks_client() -> PyJWKClient:
    """Return a singleton PyJWKClient for the Supabase JWKS endpoint."""
    global _jwks_client
    if _jwks_client is None:
        settings = get_settings()
        jwks_url = f"{settings.supabase_url}/auth/v1/.well-known/jwks.json"
        _jwks_client = PyJWKClient(jwks_url, cache_keys=True)
    return _jwks_client


def _decode_with_jwks(token: str, issuer: str) -> dict:
    """Verify JWT using Supabase JWKS endpoint (ES256 asymmetric keys)."""
    client = _get_jwks_client()
    signing_key = client.get_signing_key_from_jwt(token)
    return jwt.decode(
        token,
        signing_key.key,
        algorithms=["ES256"],
        issuer=issuer,
        audience="authenticated",
        options={"require": ["exp", "sub", "iss"]},
    )


def _decode_with_secret(token: str, secret: str, issuer: str) -> dict:
    """Verify JWT using HS256 symmetric secret (legacy Supabase signing)."""
    return jwt.decode(
        token,
        secret,
        algorithms=["HS256"],
        issuer=issuer,
        audience="authenticated",
        options={"require": ["exp", "sub", "iss"]},
    )


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """
    Extract and verify user ID from a Supabase JWT.

    Verification strategy (in order):
      1. JWKS (ES256), supports key rotation automatically.
      2. HS256 with ``SUPABASE_JWT_SECRET`` for legacy signing.

    Returns:
        Authenticated user ID (``sub`` claim).

    Raises:
        HTTPException 401: token missing, expired, or invalid.
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = credentials.credentials
    settings = get_settings()
    issuer = f"{settings.supabase_url}/auth/v1"

    payload: Optional[dict] = None

    # --- Strategy 1: JWKS (ES256) ---
    try:
        payload = _decode_with_jwks(token, issuer)
    except (jwt.exceptions.PyJWKClientError, jwt.InvalidTokenError) as jwks_err:
        logger.debug("JWKS verification failed, trying HS256 fallback: %s", jwks_err)

    # --- Strategy 2: HS256 fallback ---
    if payload is None and settings.supabase_jwt_secret:
        try:
            payload = _decode_with_secret(
                token, settings.supabase_jwt_secret, issuer
            )
        except jwt.ExpiredSignatureError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has expired",
            )
        except jwt.InvalidTokenError as e:
            logger.warning("HS256 JWT verification also failed: %s", e)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or unverifiable token",
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: missing user ID",
        )

    return user_id


async def get_current_staff(
    user_id: Annotated[str, Depends(get_current_user_id)],
    users: UserRepoDep,
) -> StaffIdentity:
    """
    Resolve the authenticated caller to a staff identity.

    Only ``admin`` and ``staff`` users may start, end or list sessions.

    Raises:
        HTTPException 401: token subject is not a known user
        HTTPException 403: caller is a customer
    """
    try:
        uid = UUID(user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: malformed user ID",
        )

    user = await users.get_user(uid)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown user",
        )

    try:
        role = UserRole(user.role)
    except ValueError:
        role = None

    if role not in STAFF_ROLES:
        logger.warning(f"User {user_id} with role {user.role!r} denied staff access")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Staff access required",
        )

    return StaffIdentity(id=user.id, name=user.name, email=user.email, role=role)


StaffDep = Annotated[StaffIdentity, Depends(get_current_staff)]


async def get_session_service(
    session: SessionDep,
    sessions: SessionRepoDep,
    subscriptions: SubscriptionRepoDep,
    notifier: SessionWebhookNotifier = Depends(get_session_notifier),
) -> AsyncGenerator[SessionService, None]:
    """
    Dependency provider for SessionService.

    The service and its repositories share the request's AsyncSession.
    """
    yield SessionService(session, sessions, subscriptions, notifier)


SessionServiceDep = Annotated[SessionService, Depends(get_session_service)]


# =============================================================================
# Re-export DB dependencies for a single import source
# Routers should import from api.dependencies, not db.dependencies directly.
# =============================================================================
from cowork.infrastructure.db.dependencies import (  # noqa: E402, F401
    PlanRepoDep,
)
