"""
Staff Identifier Derivation

Staff members are addressed in URLs by a short keyed hash of their first name,
so the real address never reaches the browser. The same name and secret always
give the same identifier; without the secret the name cannot be recovered.
"""
import hashlib
import hmac
import re

# 16 hex chars = first 8 bytes of the HMAC-SHA256 digest
IDENTIFIER_LENGTH = 16

_WHITESPACE = re.compile(r"\s+")
_NON_LETTER = re.compile(r"[^a-z]")


def normalize_name(name: str) -> str:
    """
    Canonical form of a display name.

    Trims, collapses whitespace, lowercases, then drops everything that is not
    an ASCII letter. "Jo 1" and "Jo" therefore normalize identically.
    """
    collapsed = _WHITESPACE.sub(" ", name.strip())
    return _NON_LETTER.sub("", collapsed.lower())


def derive_identifier(raw_name: str, secret: str) -> str:
    """
    Compute the public identifier for a staff member.

    HMAC-SHA256 over the normalized name, keyed with the deployment secret,
    truncated to IDENTIFIER_LENGTH lowercase hex characters. Total over any
    string, including one that normalizes to "".
    """
    normalized = normalize_name(raw_name)
    digest = hmac.new(
        secret.encode("utf-8"),
        normalized.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return digest[:IDENTIFIER_LENGTH]
