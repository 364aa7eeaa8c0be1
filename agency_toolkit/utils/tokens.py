"""Public identifiers handed out to agencies and customers.

Tokens are embedded in third-party pages, so they are random rather than
derived from row ids. The short alphabetic prefix only helps humans tell
tokens apart.
"""

from __future__ import annotations

import re
import secrets
import uuid

_NON_ALPHA = re.compile(r"[^a-z]")


def _prefix(name: str, fallback: str) -> str:
    return _NON_ALPHA.sub("", name.lower())[:2] or fallback


def generate_agency_token(agency_name: str) -> str:
    return f"{_prefix(agency_name, 'ag')}_{secrets.token_hex(8)}"


def generate_customer_token(customer_name: str) -> str:
    """Return ``<prefix>_<16 hex chars>``; prefix is the first two letters of the name."""
    return f"{_prefix(customer_name, 'cu')}_{secrets.token_hex(8)}"


def generate_upload_customer_token() -> str:
    """Token for customers created implicitly by an embed photo upload."""
    return f"bp_{uuid.uuid4().hex[:16]}"
