"""Mock Identity: fixed Firebase identities keyed by bearer token.

Invariants:
    - FakeVerifier replaces FirebaseTokenVerifier at the FastAPI dependency boundary
    - Unknown tokens raise AuthenticationError (401), same as a revoked Firebase token
"""

from diaspora_connect.core.errors import AuthenticationError
from diaspora_connect.infrastructure.firebase_auth import AuthenticatedUser

TOKENS = {
    "admin-token": AuthenticatedUser(uid="admin-1", email="admin@dc.test", name="Ada Admin"),
    "staff-token": AuthenticatedUser(uid="mod-1", email="mod@dc.test", name="Moe Moderator"),
    "member-token": AuthenticatedUser(uid="user-1", email="tendai@dc.test", name="Tendai Moyo"),
    "new-token": AuthenticatedUser(
        uid="new-1", email="new@dc.test", name="Nyasha New", email_verified=True,
    ),
}


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


class FakeVerifier:

    def verify(self, id_token):
        try:
            return TOKENS[id_token]
        except KeyError:
            raise AuthenticationError("Invalid ID token")
