"""API Dependencies: identity, role/tier guards, repositories and vendor clients.

Invariants:
    - Bearer tokens are verified by Firebase Auth before any guarded handler runs
    - Callers without a stored profile are treated as `supporter` / `free`
    - Role guards compare ranks (admin passes a moderator guard)
    - Vendor clients are built from settings; missing keys surface as 503 on use

Design Decisions:
    - Plain `def` dependencies: firebase-admin is synchronous, FastAPI runs
      them in its threadpool
    - Every vendor/datastore entry point is a dependency so tests swap it via
      app.dependency_overrides
"""

import logging
from functools import lru_cache

from fastapi import Depends, Header

from diaspora_connect.config import Settings, get_settings
from diaspora_connect.core.access import can_view_tier_content, role_at_least
from diaspora_connect.core.domain_types import MembershipTier, UserRole
from diaspora_connect.core.errors import (
    AuthenticationError,
    MembershipTierRequiredError,
    PermissionDeniedError,
    ServiceNotConfiguredError,
)
from diaspora_connect.infrastructure.email_client import ResendEmailClient
from diaspora_connect.infrastructure.firebase_auth import (
    AuthenticatedUser, FirebaseTokenVerifier, get_token_verifier,
)
from diaspora_connect.infrastructure.firestore import get_firestore, get_optional_firestore
from diaspora_connect.infrastructure.openai_client import ResilientOpenAIClient
from diaspora_connect.infrastructure.stripe_gateway import StripeGateway
from diaspora_connect.repositories.users import UserRepository

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    if not authorization.startswith(BEARER_PREFIX):
        raise AuthenticationError("Authorization header must use the Bearer scheme")
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthenticationError("Missing auth token")
    return token


# ─── Identity ───────────────────────────────────────────────────

def get_current_user(
    authorization: str | None = Header(default=None),
    verifier: FirebaseTokenVerifier = Depends(get_token_verifier),
) -> AuthenticatedUser:
    token = _bearer_token(authorization)
    if token is None:
        raise AuthenticationError("Missing auth token")
    return verifier.verify(token)


def get_optional_user(
    authorization: str | None = Header(default=None),
    verifier: FirebaseTokenVerifier = Depends(get_token_verifier),
) -> AuthenticatedUser | None:
    """Identity when a token is sent; a bad token is still rejected."""
    token = _bearer_token(authorization)
    if token is None:
        return None
    return verifier.verify(token)


# ─── Repositories ───────────────────────────────────────────────

def repository(repo_cls):
    """Build a dependency that yields repo_cls bound to the Firestore client."""
    def dependency(db=Depends(get_firestore)):
        return repo_cls(db)
    dependency.__name__ = f"get_{repo_cls.__name__}"
    return dependency


def optional_repository(repo_cls):
    """Like repository(), but yields None instead of failing when Firestore is unavailable."""
    def dependency(db=Depends(get_optional_firestore)):
        return repo_cls(db) if db is not None else None
    dependency.__name__ = f"get_optional_{repo_cls.__name__}"
    return dependency


def get_current_profile(
    user: AuthenticatedUser = Depends(get_current_user),
    users: UserRepository = Depends(repository(UserRepository)),
) -> dict:
    profile = users.get(user.uid)
    if profile is None:
        return {
            "uid": user.uid,
            "email": user.email,
            "role": UserRole.SUPPORTER.value,
            "membershipTier": MembershipTier.FREE.value,
        }
    return profile


# ─── Guards ─────────────────────────────────────────────────────

def require_role(required: UserRole):
    """Dependency factory: caller's role must rank at or above `required`."""
    def guard(profile: dict = Depends(get_current_profile)) -> dict:
        if not role_at_least(profile.get("role"), required):
            logger.warning(
                f"Role '{profile.get('role')}' below required '{required.value}'",
                extra={"user_id": profile.get("uid")},
            )
            raise PermissionDeniedError(required.value)
        return profile
    return guard


def require_tier(required: MembershipTier):
    """Dependency factory: caller's membership tier must reach `required` (staff bypass)."""
    def guard(profile: dict = Depends(get_current_profile)) -> dict:
        if not can_view_tier_content(profile, required.value):
            raise MembershipTierRequiredError(required.value)
        return profile
    return guard


require_staff = require_role(UserRole.MODERATOR)
require_admin = require_role(UserRole.ADMIN)


# ─── Vendor clients ─────────────────────────────────────────────

def get_stripe_gateway(settings: Settings = Depends(get_settings)) -> StripeGateway:
    return StripeGateway(settings.stripe_secret_key, settings.stripe_webhook_secret)


def get_email_client(settings: Settings = Depends(get_settings)) -> ResendEmailClient:
    return ResendEmailClient(settings.resend_api_key, settings.email_from)


@lru_cache
def _chat_client(
    api_key: str, max_retries: int, base_delay_ms: int, max_delay_ms: int, timeout_seconds: int,
) -> ResilientOpenAIClient:
    return ResilientOpenAIClient(
        api_key,
        max_retries=max_retries,
        base_delay_ms=base_delay_ms,
        max_delay_ms=max_delay_ms,
        timeout_seconds=timeout_seconds,
    )


def get_chat_client(settings: Settings = Depends(get_settings)) -> ResilientOpenAIClient:
    if not settings.openai_api_key:
        raise ServiceNotConfiguredError("OpenAI", "openai_api_key")
    return _chat_client(
        settings.openai_api_key,
        settings.openai_max_retries,
        settings.openai_base_delay_ms,
        settings.openai_max_delay_ms,
        settings.openai_timeout_seconds,
    )
