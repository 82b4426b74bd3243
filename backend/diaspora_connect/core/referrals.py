"""Referral Rules: codes, links and forward-only status progression.

Invariants:
    - Codes are 8 characters from an alphabet without 0/O/1/I
    - Status never regresses: signed_up -> applied -> paid
"""

import secrets

from diaspora_connect.core.domain_types import REFERRAL_RANK, ReferralStatus

REFERRAL_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
REFERRAL_CODE_LENGTH = 8


def generate_referral_code() -> str:
    return "".join(
        secrets.choice(REFERRAL_CODE_ALPHABET) for _ in range(REFERRAL_CODE_LENGTH)
    )


def normalize_referral_code(code: str | None) -> str | None:
    if not code:
        return None
    cleaned = code.strip().upper()
    return cleaned or None


def next_referral_status(
    current: str | ReferralStatus, target: ReferralStatus,
) -> ReferralStatus | None:
    """Return target if it advances current, else None (no update needed)."""
    try:
        current_rank = REFERRAL_RANK[ReferralStatus(current)]
    except ValueError:
        current_rank = -1
    if REFERRAL_RANK[target] > current_rank:
        return target
    return None


def referral_link(base_url: str, code: str) -> str:
    return f"{base_url}/signup?ref={code}"
