"""Sonosync - keeps an observable property model in sync with a Sonos speaker."""

__version__ = "0.1.0"
