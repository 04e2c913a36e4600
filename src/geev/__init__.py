"""Geev: community giveaway and help-request platform."""

__version__ = "0.1.0"
