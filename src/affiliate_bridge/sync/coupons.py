"""Coupon code derivation for affiliates."""

import re
import unicodedata

from affiliate_bridge.integrations.base import AffiliateRecord

MAX_CODE_LENGTH = 20
FALLBACK_PREFIX = "AFF"

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


def _sanitize(value: str) -> str:
    # NFD splits accented letters into base letter + combining mark; the mark
    # is then dropped with everything else that is not ASCII alphanumeric.
    decomposed = unicodedata.normalize("NFD", value)
    return _NON_ALNUM.sub("", decomposed).upper()[:MAX_CODE_LENGTH]


def fallback_code(affiliate_id: str | None) -> str:
    """``AFF`` followed by the affiliate ID, sanitized like any other code."""
    return _sanitize(f"{FALLBACK_PREFIX}{affiliate_id or ''}") or FALLBACK_PREFIX


def suggest_coupon_code(affiliate: AffiliateRecord) -> str:
    """
    Derive the store coupon code for an affiliate.

    Prefers the affiliate's own referral code, then its display name, then
    ``AFF<id>``. The result is uppercase ASCII alphanumeric, at most 20
    characters, and never empty.

    >>> suggest_coupon_code(AffiliateRecord(affiliate_id="7", code="café#10"))
    'CAFE10'
    """
    base = affiliate.code or affiliate.name or f"{FALLBACK_PREFIX}{affiliate.affiliate_id or ''}"
    return _sanitize(str(base)) or fallback_code(affiliate.affiliate_id)
