"""
Claim codes presented by customers at the pickup counter.
"""
from __future__ import annotations

import secrets

# I, O, 0 and 1 are left out so codes survive being read aloud.
CLAIM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
DEFAULT_CLAIM_CODE_LENGTH = 8


def generate_claim_code(length: int = DEFAULT_CLAIM_CODE_LENGTH) -> str:
    """Generate an unpredictable claim code."""
    if length < DEFAULT_CLAIM_CODE_LENGTH:
        raise ValueError(f"Claim codes need at least {DEFAULT_CLAIM_CODE_LENGTH} characters")
    return "".join(secrets.choice(CLAIM_CODE_ALPHABET) for _ in range(length))


def normalize_claim_code(code: str) -> str:
    """Claim codes are case-insensitive and tolerate surrounding whitespace."""
    return (code or "").strip().upper()
