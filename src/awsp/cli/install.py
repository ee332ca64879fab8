"""Shell rc integration for the ``awsp`` helper function."""

import os
from pathlib import Path
from typing import Optional

SHELLS = ("bash", "zsh", "fish")
MARKER_START = "# >>> aws-profile-selector start >>>"
MARKER_END = "# <<< aws-profile-selector end <<<"

_POSIX_FUNCTION = """awsp() {
  tmp=$(mktemp)
  aws-profile-selector "$@" --out "$tmp" || { rm -f "$tmp"; return; }
  prof=$(<"$tmp")
  rm -f "$tmp"
  [ -z "$prof" ] && return
  export AWS_PROFILE="$prof"
  echo "AWS_PROFILE=$AWS_PROFILE"
}"""

SNIPPETS: dict[str, str] = {
    "bash": f"""{MARKER_START}
{_POSIX_FUNCTION}
bind -x '"\\C-t":awsp'
{MARKER_END}
""",
    "zsh": f"""{MARKER_START}
{_POSIX_FUNCTION}
bindkey -s '^T' 'awsp\\n'
{MARKER_END}
""",
    "fish": f"""{MARKER_START}
function awsp
    set -l tmp (mktemp)
    aws-profile-selector $argv --out $tmp
    or begin; rm -f $tmp; return; end
    set -l prof (cat $tmp)
    rm -f $tmp
    test -z "$prof"; and return
    set -gx AWS_PROFILE $prof
    echo (set_color green)"AWS_PROFILE=$AWS_PROFILE"(set_color normal)
end
function bind_awsp
    awsp
    commandline -f repaint
end
bind \\ct bind_awsp
{MARKER_END}
""",
}


def detect_shell(shell: Optional[str] = None) -> str:
    """Resolve the target shell from an explicit name or $SHELL.

    Raises:
        ValueError: If an explicit shell name is not supported
    """
    if shell:
        name = shell.lower()
        if name not in SHELLS:
            raise ValueError(f"Unsupported shell: {shell} (choose from {', '.join(SHELLS)})")
        return name
    login_shell = os.environ.get("SHELL", "")
    for name in SHELLS:
        if login_shell.endswith(name):
            return name
    return "bash"


def get_snippet(shell: str) -> str:
    """Helper snippet for a shell."""
    return SNIPPETS[shell]


def rc_path(shell: str) -> Path:
    """Startup file the snippet belongs in."""
    home = Path.home()
    if shell == "zsh":
        return home / ".zshrc"
    if shell == "fish":
        return home / ".config" / "fish" / "config.fish"
    return home / ".bashrc"


def is_installed(path: Path) -> bool:
    """Check if the snippet marker is already in an rc file."""
    try:
        return MARKER_START in path.read_text()
    except FileNotFoundError:
        return False


def apply_snippet(shell: str, path: Optional[Path] = None) -> tuple[bool, Path]:
    """Append the snippet to the shell's rc file.

    Returns:
        Tuple of (written, path); written is False when already installed
    """
    target = path or rc_path(shell)
    if is_installed(target):
        return False, target
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "a") as f:
        f.write(f"\n{get_snippet(shell)}")
    return True, target
