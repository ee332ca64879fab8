"""Constants used throughout awsp."""

# Lines of table shown below the filter prompt
DEFAULT_PAGE_SIZE = 20

# Fuzzy match cutoff (0 = exact, 1 = anything)
DEFAULT_FUZZY_THRESHOLD = 0.4

# Exit status on Ctrl-C (128 + SIGINT)
INTERRUPT_EXIT_CODE = 130

# Value shown when a profile has no sso_account_id
MISSING_ACCOUNT_ID = "N/A"


class Colors:
    """Style strings (rich syntax) used by the table and prompt."""

    BORDER = "bright_black"
    HEADER = "bold bright_white"
    PROMPT = "#6366F1"
    CURSOR = "bright_black"
    SELECTED = "bold bright_white on #312E81"
    SELECTED_BORDER = "bold #818CF8"
    SELECTED_CURRENT = "bold green on #312E81"
    CURRENT = "bold green"
    CURRENT_MARKER = "green"
    SESSION_ACTIVE = "green"
    SESSION_EXPIRED = "yellow"


class SessionLabel:
    """SSO column values."""

    ACTIVE = "active"
    EXPIRED = "expired"
    NONE = ""
