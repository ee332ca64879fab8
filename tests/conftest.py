"""Shared pytest fixtures."""

import tempfile
from pathlib import Path

import pytest

from awsp.core.profiles import Profile


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test data."""
    with tempfile.TemporaryDirectory() as d:
        yield Path(d)


@pytest.fixture
def mock_awsp_dir(temp_dir, monkeypatch):
    """Set up a mock ~/.config/awsp directory."""
    awsp_dir = temp_dir / ".awsp"
    awsp_dir.mkdir()
    monkeypatch.setenv("AWSP_DIR", str(awsp_dir))
    for name in ("AWSP_PAGE_SIZE", "AWSP_DEBUG", "AWSP_FUZZY_THRESHOLD"):
        monkeypatch.delenv(name, raising=False)

    from awsp.utils.debug import reload_config

    reload_config()
    yield awsp_dir
    reload_config()


@pytest.fixture
def profiles():
    """The three-profile set used by the selector scenarios."""
    return (Profile("dev"), Profile("prod"), Profile("staging"))


@pytest.fixture
def aws_config(temp_dir):
    """Write a small AWS config file and return its path."""
    path = temp_dir / "config"
    path.write_text(
        """\
[default]
region = us-east-1

[profile dev]
sso_session = corp
sso_account_id = 111111111111
region = eu-west-1

[sso-session corp]
sso_start_url = https://corp.awsapps.com/start
sso_region = us-east-1

# legacy credentials
[profile prod]
aws_access_key_id = BBB
"""
    )
    return path
