"""awsp - interactive AWS profile selector with fuzzy search."""

from importlib.metadata import version

__version__ = version("aws-profile-selector")

from awsp.core import FuzzySearcher, Layout, Profile, create_layout, load_profiles

__all__ = [
    "FuzzySearcher",
    "Layout",
    "Profile",
    "create_layout",
    "load_profiles",
]
