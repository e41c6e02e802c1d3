"""GHL Bridge - OAuth installation and webhook bridge between HighLevel and Zenexa."""

__version__ = "0.1.0"
