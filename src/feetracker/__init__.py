"""Horizon fee tracker -- polls Stellar fee statistics, keeps recent history, derives insights."""

__version__ = "0.1.0"
