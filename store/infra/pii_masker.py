"""
PII (Personally Identifiable Information) masking utilities.
"""
import re
from typing import Any

UUID_RE = re.compile(r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$', re.I)


def mask_email(email: str) -> str:
    """Mask email address."""
    if "@" not in email:
        return email
    local, domain = email.split("@", 1)
    if len(local) <= 2:
        masked = "**"
    else:
        masked = local[:2] + "*" * (len(local) - 2)
    return f"{masked}@{domain}"


def mask_name(name: str) -> str:
    """Mask name."""
    if len(name) <= 2:
        return "**"
    return name[0] + "*" * (len(name) - 2) + name[-1]


def mask_uuid(uuid_str: str) -> str:
    """Mask UUID (show first 8 chars only)."""
    if len(uuid_str) < 8:
        return "*" * len(uuid_str)
    return uuid_str[:8] + "-****-****-****-************"


def mask_claim_code(code: str) -> str:
    """Keep only the last two characters of a claim code."""
    if len(code) <= 2:
        return "*" * len(code)
    return "*" * (len(code) - 2) + code[-2:]


def mask_value(key: str, value: Any) -> Any:
    """Mask a single value according to its key and shape."""
    if not isinstance(value, str):
        return value
    key_lower = key.lower()
    if "claim" in key_lower:
        return mask_claim_code(value)
    if "@" in value:
        return mask_email(value)
    if UUID_RE.match(value):
        return mask_uuid(value)
    if "name" in key_lower:
        return mask_name(value)
    return value


def mask_pii_in_dict(data: dict) -> dict:
    """Mask PII in dictionary recursively."""
    masked = {}
    pii_fields = {
        "email", "name", "full_name", "member_name", "user_id", "membership_id",
        "claim_code", "claimcode", "membershipid",
    }

    for key, value in data.items():
        key_lower = key.lower()

        if isinstance(value, dict):
            masked[key] = mask_pii_in_dict(value)
        elif isinstance(value, list):
            masked[key] = [mask_pii_in_dict(item) if isinstance(item, dict) else item for item in value]
        elif key_lower in pii_fields or key_lower.endswith("_id"):
            masked[key] = mask_value(key, value)
        else:
            masked[key] = value

    return masked
