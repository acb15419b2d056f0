"""trackline — interaction timelines from pairwise event data."""

__version__ = "0.3.0"
