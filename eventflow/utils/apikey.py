"""API key generation and validation helpers."""
from __future__ import annotations

import hashlib
import hmac
import secrets
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from eventflow.config import get_settings
from eventflow.models.api_key import ApiKey

KEY_PREFIX = "evf_"


def hash_key(raw: str) -> str:
    """Return an HMAC-SHA256 hash for the provided API key."""

    secret = get_settings().SECRET_KEY
    return hmac.new(secret.encode(), raw.encode(), hashlib.sha256).hexdigest()


def gen_key(prefix_len: int = 6) -> tuple[str, str, str]:
    """Generate a user-facing API key, its prefix, and the stored hash."""

    prefix = KEY_PREFIX + secrets.token_hex(prefix_len)[:prefix_len]
    suffix = secrets.token_urlsafe(32)
    raw = f"{prefix}.{suffix}"
    return raw, prefix, hash_key(raw)


def _as_aware(value: datetime) -> datetime:
    # SQLite hands timezone-aware columns back as naive values.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def find_valid_key(db: Session, raw: str) -> ApiKey | None:
    """Return the active, unexpired key matching ``raw``."""

    stmt = select(ApiKey).where(ApiKey.key_hash == hash_key(raw), ApiKey.is_active.is_(True))
    key = db.scalars(stmt).first()
    if key and (not key.expires_at or _as_aware(key.expires_at) > datetime.now(UTC)):
        return key
    return None


__all__ = ["KEY_PREFIX", "find_valid_key", "gen_key", "hash_key"]
