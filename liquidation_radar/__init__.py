"""Read-only liquidation analytics for Aave V3."""

__version__ = "0.1.0"
