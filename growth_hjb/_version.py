"""Version information for growth_hjb."""

__version__ = "0.3.0"
