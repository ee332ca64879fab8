"""Profile records and the AWS config reader."""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from awsp.core.sessions import is_session_valid
from awsp.utils.constants import MISSING_ACCOUNT_ID
from awsp.utils.exceptions import ConfigNotFoundError

_SECTION_RE = re.compile(r"^\s*\[\s*([^\]]+?)\s*\]")
_KEY_VALUE_RE = re.compile(r"^\s*([^=]+?)\s*=\s*(.*?)\s*$")


@dataclass(frozen=True)
class Profile:
    """One selectable AWS profile."""

    name: str
    account_id: str = MISSING_ACCOUNT_ID
    region: str = ""
    sso_session: Optional[str] = None
    session_active: bool = False


def _profile_name(section: str) -> Optional[str]:
    """Profile name for a config section header, or None for other sections."""
    if section == "default":
        return "default"
    parts = section.split(None, 1)
    if len(parts) == 2 and parts[0].lower() == "profile":
        return parts[1].strip()
    return None


def read_aws_config(path: Path) -> dict[str, dict[str, str]]:
    """Parse an AWS config file into ``{profile_name: {key: value}}``.

    Only ``[profile NAME]`` and ``[default]`` sections are collected;
    ``[sso-session ...]`` and other sections are skipped.

    Raises:
        ConfigNotFoundError: If the file does not exist
    """
    if not path.exists():
        raise ConfigNotFoundError(path)

    profiles: dict[str, dict[str, str]] = {}
    current: Optional[str] = None

    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped[0] in "#;":
            continue

        section = _SECTION_RE.match(line)
        if section:
            current = _profile_name(section.group(1))
            if current is not None:
                profiles.setdefault(current, {})
            continue

        if current is None:
            continue

        kv = _KEY_VALUE_RE.match(line)
        if kv:
            profiles[current][kv.group(1).strip()] = kv.group(2).strip()

    return profiles


def build_profiles(
    config: dict[str, dict[str, str]], cache_dir: Optional[Path] = None
) -> tuple[Profile, ...]:
    """Turn parsed config sections into sorted Profile records."""
    records = []
    for name, attrs in config.items():
        sso_session = attrs.get("sso_session") or attrs.get("sso_start_url")
        records.append(
            Profile(
                name=name,
                account_id=attrs.get("sso_account_id") or MISSING_ACCOUNT_ID,
                region=attrs.get("region", ""),
                sso_session=sso_session,
                session_active=is_session_valid(sso_session, cache_dir),
            )
        )
    return tuple(sorted(records, key=lambda p: p.name.lower()))


def load_profiles(
    path: Optional[Path] = None, cache_dir: Optional[Path] = None
) -> tuple[Profile, ...]:
    """Read the AWS config and build the record set for the selector."""
    if path is None:
        from awsp.utils.config import Config

        path = Config().get_aws_config_path()
    return build_profiles(read_aws_config(path), cache_dir)
