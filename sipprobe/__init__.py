"""SIP REGISTER connectivity probe."""

__version__ = "1.0.0"
