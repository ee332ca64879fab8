"""Core profile model, search and table layout."""

from awsp.core.layout import Layout, create_layout
from awsp.core.profiles import Profile, load_profiles, read_aws_config
from awsp.core.search import FuzzySearcher

__all__ = [
    "FuzzySearcher",
    "Layout",
    "Profile",
    "create_layout",
    "load_profiles",
    "read_aws_config",
]
