"""Role and permission service for the academy management platform."""

__version__ = "1.0.0"
