"""Multicast proxy building blocks: querier timers, proxy messages and tester settings."""

__version__ = "0.1.0"