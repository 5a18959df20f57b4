# This project was developed with assistance from AI tools.
"""
Keycloak bearer-token authentication for the case workflow API.

Every request resolves to a ``UserContext``: one of the four workflow roles
(admin, staff, bank, student) plus the data scope that decides which cases
the caller can see. Bank desks are scoped by the ``bank_id`` claim and
students by their subject id.

Set AUTH_DISABLED=true to bypass validation (tests / local dev without Keycloak).
"""

import logging
import time
from typing import Annotated

import httpx
import jwt
from db.enums import UserRole
from fastapi import Depends, HTTPException, Request, status

from ..core.auth import build_data_scope
from ..core.config import settings
from ..schemas.auth import DataScope, TokenPayload, UserContext

logger = logging.getLogger(__name__)

# Most privileged first; a token carrying several workflow roles acts as the first match.
_ROLE_PRECEDENCE = (UserRole.ADMIN, UserRole.STAFF, UserRole.BANK, UserRole.STUDENT)

# ---------------------------------------------------------------------------
# Realm signing keys
# ---------------------------------------------------------------------------


class _RealmKeys:
    """Signing keys of the configured realm, indexed by ``kid``.

    Keys are refetched after ``JWKS_CACHE_TTL`` seconds, or once immediately
    when a token names a kid the cache has not seen (key rotation).
    """

    def __init__(self) -> None:
        self._by_kid: dict[str, jwt.PyJWK] = {}
        self._fetched_at: float = 0

    @property
    def issuer(self) -> str:
        return f"{settings.KEYCLOAK_URL}/realms/{settings.KEYCLOAK_REALM}"

    def _refresh(self) -> None:
        try:
            response = httpx.get(f"{self.issuer}/protocol/openid-connect/certs", timeout=5)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Failed to fetch realm keys from Keycloak: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Authentication service unavailable",
            ) from exc

        key_set = jwt.PyJWKSet.from_dict(response.json())
        self._by_kid = {key.key_id: key for key in key_set.keys if key.key_id}
        self._fetched_at = time.time()

    def get(self, kid: str | None) -> jwt.PyJWK:
        if not self._by_kid or time.time() - self._fetched_at > settings.JWKS_CACHE_TTL:
            self._refresh()
        if kid not in self._by_kid:
            self._refresh()
        try:
            return self._by_kid[kid]
        except KeyError:
            raise jwt.InvalidTokenError(f"No signing key for kid={kid}") from None


_realm_keys = _RealmKeys()

# ---------------------------------------------------------------------------
# Token validation
# ---------------------------------------------------------------------------


def _extract_token(request: Request) -> str | None:
    """Extract Bearer token from Authorization header."""
    auth = request.headers.get("Authorization")
    if auth and auth.startswith("Bearer "):
        return auth[7:]
    return None


def _decode_token(token: str) -> TokenPayload:
    """Validate a realm-issued RS256 token and return its claims."""
    kid = jwt.get_unverified_header(token).get("kid")
    payload = jwt.decode(
        token,
        _realm_keys.get(kid).key,
        algorithms=["RS256"],
        issuer=_realm_keys.issuer,
        options={"verify_aud": False},
    )
    return TokenPayload(**payload)


def _resolve_role(token_payload: TokenPayload) -> UserRole:
    """Pick the workflow role from realm_access.roles, ignoring Keycloak built-ins."""
    claimed = set(token_payload.realm_access.get("roles", []))
    user_roles = [role for role in _ROLE_PRECEDENCE if role.value in claimed]

    if not user_roles:
        logger.warning("User %s has no workflow role in %s", token_payload.sub, sorted(claimed))
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No recognized role assigned",
        )

    if len(user_roles) > 1:
        logger.warning(
            "User %s has multiple roles %s, acting as %s",
            token_payload.sub,
            [r.value for r in user_roles],
            user_roles[0].value,
        )

    return user_roles[0]


def _resolve_bank_id(token_payload: TokenPayload, role: UserRole) -> str | None:
    """Bank users must carry a bank_id claim; it scopes every case they see."""
    if role != UserRole.BANK:
        return None
    bank_id = (token_payload.bank_id or "").strip()
    if not bank_id:
        logger.warning("Bank user %s has no bank_id claim", token_payload.sub)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Bank user is not linked to a bank",
        )
    return bank_id


def _display_name(token_payload: TokenPayload, bank_id: str | None) -> str:
    """Name recorded as ``changed_by`` on history rows written by this caller."""
    if token_payload.name:
        return token_payload.name
    if bank_id:
        return f"{bank_id} Bank Desk"
    return token_payload.preferred_username or token_payload.sub


# ---------------------------------------------------------------------------
# FastAPI dependencies
# ---------------------------------------------------------------------------

_DISABLED_USER = UserContext(
    user_id="dev-user",
    role=UserRole.ADMIN,
    email="dev@edu-loan.local",
    name="Dev User",
    data_scope=DataScope(full_pipeline=True),
)


async def get_current_user(request: Request) -> UserContext:
    """FastAPI dependency: validate JWT and return UserContext.

    When AUTH_DISABLED=true, returns a dev admin user without token validation.
    """
    if settings.AUTH_DISABLED:
        return _DISABLED_USER

    token = _extract_token(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = _decode_token(token)
    except jwt.ExpiredSignatureError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
    except jwt.InvalidTokenError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc

    role = _resolve_role(payload)
    bank_id = _resolve_bank_id(payload, role)

    return UserContext(
        user_id=payload.sub,
        role=role,
        email=payload.email,
        name=_display_name(payload, bank_id),
        data_scope=build_data_scope(role, payload.sub, bank_id),
    )


CurrentUser = Annotated[UserContext, Depends(get_current_user)]


def require_roles(*allowed_roles: UserRole):
    """Dependency factory: restrict a route to specific workflow roles.

    Usage:
        @router.post("/seed", dependencies=[Depends(require_roles(UserRole.ADMIN))])
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
