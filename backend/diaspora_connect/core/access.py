"""Access Rules: role hierarchy and membership-tier gating.

Invariants:
    - Roles and tiers compare by rank, never by string
    - Unknown role/tier strings rank lowest (fail closed)
    - Staff (moderator, admin) see all tier-gated content
"""

from diaspora_connect.core.domain_types import (
    MembershipTier, ROLE_RANK, TIER_RANK, UserRole,
)


def _role_rank(role: str | UserRole | None) -> int:
    try:
        return ROLE_RANK[UserRole(role)]
    except ValueError:
        return -1


def _tier_rank(tier: str | MembershipTier | None) -> int:
    try:
        return TIER_RANK[MembershipTier(tier)]
    except ValueError:
        return -1


def role_at_least(role: str | UserRole | None, required: UserRole) -> bool:
    """True when role ranks at or above required."""
    return _role_rank(role) >= ROLE_RANK[required]


def tier_at_least(
    tier: str | MembershipTier | None, required: MembershipTier,
) -> bool:
    """True when tier ranks at or above required."""
    return _tier_rank(tier) >= TIER_RANK[required]


def is_staff(role: str | UserRole | None) -> bool:
    return role_at_least(role, UserRole.MODERATOR)


def can_view_tier_content(profile: dict, required_tier: str | None) -> bool:
    """Gate content by membership tier; content without a tier is public to members."""
    if not required_tier:
        return True
    if is_staff(profile.get("role")):
        return True
    try:
        required = MembershipTier(required_tier)
    except ValueError:
        return False
    return tier_at_least(profile.get("membershipTier"), required)
