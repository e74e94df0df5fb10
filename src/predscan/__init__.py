"""predscan - prediction market expiry scanner."""

__version__ = "0.1.0"
