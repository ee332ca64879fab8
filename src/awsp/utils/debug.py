"""Debug logging utility.

Lines go to ``debug.log`` in the awsp directory only. The selector owns the
terminal while it runs, so nothing here writes to stdout or stderr except
``log_error``, which the CLI calls after the terminal has been restored.
"""

import sys
from datetime import datetime

from awsp.utils.config import Config, get_awsp_dir

_config = None


def _get_config() -> Config:
    """Get cached config instance."""
    global _config
    if _config is None:
        _config = Config(get_awsp_dir())
    return _config


def reload_config():
    """Reload config (call after debug mode changes)."""
    global _config
    _config = None


def _log_to_file(line: str):
    """Append line to debug log file."""
    try:
        log_dir = get_awsp_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        with open(log_dir / "debug.log", "a") as f:
            f.write(line + "\n")
    except OSError:
        pass


def _timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]


def debug(category: str, message: str, **kwargs):
    """Log debug message if debug mode is enabled.

    Args:
        category: Category like 'keys', 'search', 'render', 'config'
        message: Debug message
        **kwargs: Additional key=value pairs to log
    """
    config = _get_config()
    if not config.debug:
        return

    extras = " ".join(f"{k}={v}" for k, v in kwargs.items()) if kwargs else ""
    line = f"[awsp:{category}] {_timestamp()} {message}"
    if extras:
        line += f" | {extras}"

    _log_to_file(line)


def debug_keys(message: str, **kwargs):
    """Log keyboard-related debug message."""
    debug("keys", message, **kwargs)


def debug_search(message: str, **kwargs):
    """Log search-related debug message."""
    debug("search", message, **kwargs)


def debug_selector(message: str, **kwargs):
    """Log selector state debug message."""
    debug("selector", message, **kwargs)


def debug_config(message: str, **kwargs):
    """Log config-loading debug message."""
    debug("config", message, **kwargs)


def log_error(category: str, message: str, exc: BaseException = None):
    """Log error message ALWAYS (even if debug mode is off).

    Args:
        category: Category like 'cli', 'config'
        message: Error message
        exc: Optional exception to include traceback
    """
    import traceback

    line = f"[awsp:{category}] {_timestamp()} ERROR: {message}"

    if exc:
        tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
        line += "\n" + "".join(tb)

    _log_to_file(line)

    try:
        print(line, file=sys.stderr)
    except BrokenPipeError:
        pass
