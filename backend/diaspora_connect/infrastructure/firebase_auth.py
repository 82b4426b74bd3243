"""Firebase Auth: ID token verification for bearer-authenticated requests.

Invariants:
    - Expired, revoked, malformed or unverifiable tokens raise AuthenticationError
    - Verified identity carries uid and email as issued by Firebase Auth
"""

import logging
from dataclasses import dataclass

import firebase_admin
from firebase_admin import auth
from firebase_admin.exceptions import FirebaseError

from diaspora_connect.core.errors import AuthenticationError, ServiceNotConfiguredError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity claims extracted from a verified Firebase ID token."""
    uid: str
    email: str | None = None
    email_verified: bool = False
    name: str | None = None
    picture: str | None = None


class FirebaseTokenVerifier:
    """Verifies Firebase ID tokens against the configured project."""

    def __init__(self, app: firebase_admin.App, check_revoked: bool = True):
        self.app = app
        self.check_revoked = check_revoked

    def verify(self, id_token: str) -> AuthenticatedUser:
        try:
            claims = auth.verify_id_token(
                id_token, app=self.app, check_revoked=self.check_revoked,
            )
        except auth.ExpiredIdTokenError:
            raise AuthenticationError("ID token has expired")
        except auth.RevokedIdTokenError:
            raise AuthenticationError("ID token has been revoked")
        except auth.UserDisabledError:
            raise AuthenticationError("User account is disabled")
        except (auth.InvalidIdTokenError, ValueError):
            raise AuthenticationError("Invalid ID token")
        except FirebaseError as e:
            logger.error(f"Token verification failed: {e}")
            raise AuthenticationError("Could not verify ID token")
        return AuthenticatedUser(
            uid=claims["uid"],
            email=claims.get("email"),
            email_verified=bool(claims.get("email_verified", False)),
            name=claims.get("name"),
            picture=claims.get("picture"),
        )


# Singleton (initialized on startup)
token_verifier: FirebaseTokenVerifier | None = None


def init_token_verifier(app: firebase_admin.App) -> FirebaseTokenVerifier:
    global token_verifier
    token_verifier = FirebaseTokenVerifier(app)
    return token_verifier


def get_token_verifier() -> FirebaseTokenVerifier:
    """FastAPI dependency for the token verifier."""
    if not token_verifier:
        raise ServiceNotConfiguredError("Firebase Auth", "firebase_project_id")
    return token_verifier
