"""Track DeFi positions across networks and value them in USD."""

__version__ = "0.1.0"
