"""Discord RC Feed - wiki recent changes as Discord webhook messages."""

__version__ = "0.1.0"
