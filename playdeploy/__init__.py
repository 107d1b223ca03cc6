"""Publish Android apps to Google Play from CI."""

__version__ = "0.1.0"
