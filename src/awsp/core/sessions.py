"""SSO session validity lookups.

The AWS CLI caches SSO tokens as ``~/.aws/sso/cache/<sha1(name)>.json`` where
``name`` is the ``sso_session`` (or the legacy ``sso_start_url``) of a
profile.
"""

import hashlib
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


def default_cache_dir() -> Path:
    """Default AWS SSO token cache directory."""
    return Path.home() / ".aws" / "sso" / "cache"


def cache_file_for(sso_session: str, cache_dir: Optional[Path] = None) -> Path:
    """Path of the cached token file for an SSO session."""
    digest = hashlib.sha1(sso_session.encode("utf-8")).hexdigest()
    return (cache_dir or default_cache_dir()) / f"{digest}.json"


def parse_expires_at(value: str) -> Optional[datetime]:
    """Parse an ``expiresAt`` timestamp into an aware datetime.

    Accepts ``2024-01-01T00:00:00Z`` and the older ``2024-01-01T00:00:00UTC``
    form. Returns None when the value cannot be parsed.
    """
    text = value.strip()
    if text.endswith("UTC"):
        text = text[:-3] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_session_valid(
    sso_session: Optional[str],
    cache_dir: Optional[Path] = None,
    now: Optional[datetime] = None,
) -> bool:
    """Check whether a profile's SSO session has an unexpired cached token.

    Args:
        sso_session: ``sso_session`` name or ``sso_start_url`` of the profile
        cache_dir: Token cache directory (defaults to ~/.aws/sso/cache)
        now: Reference time, defaults to the current UTC time

    Returns:
        True if a cached token exists and expires in the future
    """
    if not sso_session:
        return False

    cache_file = cache_file_for(sso_session, cache_dir)
    try:
        data = json.loads(cache_file.read_text())
    except (OSError, json.JSONDecodeError):
        return False

    expires_raw = data.get("expiresAt") if isinstance(data, dict) else None
    if not isinstance(expires_raw, str):
        return False
    expires_at = parse_expires_at(expires_raw)
    if expires_at is None:
        return False

    return expires_at > (now or datetime.now(timezone.utc))
