"""Configuration management."""

import json
import os
from pathlib import Path
from typing import Optional


def get_awsp_dir() -> Path:
    """Get the awsp data directory (XDG-compliant)."""
    if env_dir := os.environ.get("AWSP_DIR"):
        return Path(env_dir)
    return Path.home() / ".config" / "awsp"


class Config:
    """Application configuration."""

    def __init__(self, awsp_dir: Optional[Path] = None):
        """Load config from directory."""
        self.awsp_dir = awsp_dir or get_awsp_dir()
        self._config_file = self.awsp_dir / "config.json"
        self._load()

    def _load(self):
        """Load config from file."""
        from awsp.utils.constants import DEFAULT_FUZZY_THRESHOLD, DEFAULT_PAGE_SIZE

        # Set defaults
        self.page_size = DEFAULT_PAGE_SIZE
        self.debug = False
        self.fuzzy_threshold = DEFAULT_FUZZY_THRESHOLD
        # None means AWS_CONFIG_FILE or ~/.aws/config
        self.aws_config_file: Optional[str] = None
        # None means ~/.aws/sso/cache
        self.sso_cache_dir: Optional[str] = None

        if self._config_file.exists():
            try:
                data = json.loads(self._config_file.read_text())
                self.page_size = data.get("page_size", DEFAULT_PAGE_SIZE)
                self.debug = data.get("debug", False)
                self.fuzzy_threshold = data.get(
                    "fuzzy_threshold", DEFAULT_FUZZY_THRESHOLD
                )
                self.aws_config_file = data.get("aws_config_file")
                self.sso_cache_dir = data.get("sso_cache_dir")
            except (json.JSONDecodeError, IOError):
                pass

        self._apply_env_overrides()

    def _apply_env_overrides(self):
        """Apply shell AWSP_* vars on top of the file values."""
        prefix = "AWSP_"
        for key, value in os.environ.items():
            if not key.startswith(prefix):
                continue
            attr_name = key[len(prefix) :].lower()
            if attr_name == "dir" or not hasattr(self, attr_name):
                continue
            # Convert value based on current attribute type
            current = getattr(self, attr_name)
            if isinstance(current, bool):
                setattr(self, attr_name, value.lower() in ("true", "1", "yes"))
            elif isinstance(current, int):
                try:
                    setattr(self, attr_name, int(value))
                except ValueError:
                    pass
            elif isinstance(current, float):
                try:
                    setattr(self, attr_name, float(value))
                except ValueError:
                    pass
            else:
                setattr(self, attr_name, value)

    def get_aws_config_path(self) -> Path:
        """Resolve the AWS config file location."""
        if self.aws_config_file:
            return Path(self.aws_config_file).expanduser()
        if env_path := os.environ.get("AWS_CONFIG_FILE"):
            return Path(env_path).expanduser()
        return Path.home() / ".aws" / "config"

    def get_sso_cache_dir(self) -> Path:
        """Resolve the SSO token cache directory."""
        if self.sso_cache_dir:
            return Path(self.sso_cache_dir).expanduser()
        return Path.home() / ".aws" / "sso" / "cache"

    def save(self):
        """Save config to file."""
        self.awsp_dir.mkdir(parents=True, exist_ok=True)
        data = {
            "page_size": self.page_size,
            "debug": self.debug,
            "fuzzy_threshold": self.fuzzy_threshold,
            "aws_config_file": self.aws_config_file,
            "sso_cache_dir": self.sso_cache_dir,
        }
        self._config_file.write_text(json.dumps(data, indent=2))

    def set_debug(self, enabled: bool):
        """Enable or disable debug mode."""
        self.debug = enabled
        self.save()
