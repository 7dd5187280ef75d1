# This project was developed with assistance from AI tools.
"""
JWT authentication for staff users (Keycloak OIDC).

Validates Bearer tokens against Keycloak's JWKS endpoint, extracts user
identity and role, and provides FastAPI dependencies for route-level auth.
Actors (tenants, landlords, guarantors) never authenticate here; they use
their per-actor access token on the portal routes.

Set AUTH_DISABLED=true to bypass validation (tests / local dev without Keycloak).
"""

import logging
import time
from typing import Annotated

import httpx
import jwt
from db.enums import UserRole
from fastapi import Depends, HTTPException, Request, status

from ..core.auth import STAFF_ROLES, build_data_scope
from ..core.config import settings
from ..schemas.auth import DataScope, TokenPayload, UserContext

logger = logging.getLogger(__name__)

# Highest privilege first; used when a user carries several realm roles.
_ROLE_PRECEDENCE = (UserRole.ADMIN, UserRole.STAFF, UserRole.BROKER)


class _JwksCache:
    """Keycloak JWKS with a TTL; refreshed on expiry or unknown ``kid``."""

    def __init__(self):
        self._data: dict | None = None
        self._fetched_at: float = 0

    @staticmethod
    def _certs_url() -> str:
        return (
            f"{settings.KEYCLOAK_URL}/realms/{settings.KEYCLOAK_REALM}"
            "/protocol/openid-connect/certs"
        )

    def get(self, force_refresh: bool = False) -> dict:
        now = time.time()
        stale = (now - self._fetched_at) > settings.JWKS_CACHE_TTL
        if self._data is None or force_refresh or stale:
            response = httpx.get(self._certs_url(), timeout=5)
            response.raise_for_status()
            self._data = response.json()
            self._fetched_at = now
        return self._data

    def signing_key(self, token: str) -> jwt.PyJWK:
        kid = jwt.get_unverified_header(token).get("kid")
        try:
            for force in (False, True):
                for key in jwt.PyJWKSet.from_dict(self.get(force_refresh=force)).keys:
                    if key.key_id == kid:
                        return key
        except httpx.HTTPError as exc:
            logger.error("Failed to fetch JWKS from Keycloak: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Authentication service unavailable",
            ) from exc
        raise jwt.InvalidTokenError(f"No matching key found for kid={kid}")


_jwks = _JwksCache()


def _extract_token(request: Request) -> str | None:
    """Extract Bearer token from Authorization header."""
    auth = request.headers.get("Authorization")
    if auth and auth.startswith("Bearer "):
        return auth[7:]
    return None


def _decode_token(token: str) -> TokenPayload:
    """Validate and decode a JWT against Keycloak's JWKS."""
    signing_key = _jwks.signing_key(token)
    payload = jwt.decode(
        token,
        signing_key.key,
        algorithms=["RS256"],
        issuer=f"{settings.KEYCLOAK_URL}/realms/{settings.KEYCLOAK_REALM}",
        options={"verify_aud": False},
    )
    return TokenPayload(**payload)


def _resolve_role(token_payload: TokenPayload) -> UserRole:
    """Pick the most privileged known role from realm_access.roles."""
    roles = set(token_payload.realm_access.get("roles", []))
    for role in _ROLE_PRECEDENCE:
        if role.value in roles:
            return role
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="No recognized role assigned",
    )


_DISABLED_USER = UserContext(
    user_id="dev-user",
    role=UserRole.ADMIN,
    email="dev@arrenda.local",
    name="Dev User",
    data_scope=DataScope(all_policies=True),
)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(request: Request) -> UserContext:
    """FastAPI dependency: validate JWT and return UserContext.

    When AUTH_DISABLED=true, returns a dev admin user without token validation.
    """
    if settings.AUTH_DISABLED:
        return _DISABLED_USER

    token = _extract_token(request)
    if not token:
        raise _unauthorized("Missing authentication token")

    try:
        payload = _decode_token(token)
    except jwt.ExpiredSignatureError as exc:
        raise _unauthorized("Token has expired") from exc
    except jwt.InvalidTokenError as exc:
        raise _unauthorized("Invalid token") from exc

    role = _resolve_role(payload)
    return UserContext(
        user_id=payload.sub,
        role=role,
        email=payload.email,
        name=payload.name or payload.preferred_username,
        data_scope=build_data_scope(role, payload.sub),
    )


# Type alias for use in route signatures
CurrentUser = Annotated[UserContext, Depends(get_current_user)]


def require_roles(*allowed_roles: UserRole):
    """Dependency factory: restrict a route to specific roles.

    Usage:
        @router.post("/{policy_id}/cancel")
        async def cancel(user: Annotated[UserContext, Depends(require_roles(UserRole.ADMIN))]):
    """

    async def _check(user: CurrentUser) -> UserContext:
        if user.role not in allowed_roles:
            logger.warning(
                "RBAC denied: user=%s role=%s attempted route requiring %s",
                user.user_id,
                user.role.value,
                [r.value for r in allowed_roles],
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user

    return _check


StaffUser = Annotated[UserContext, Depends(require_roles(*STAFF_ROLES))]
AdminUser = Annotated[UserContext, Depends(require_roles(UserRole.ADMIN))]
