"""Notification adapters.

Keep this package import-light: the aiohttp-backed Telegram adapter is
imported from its module by whoever wires it up.
"""

__all__ = []
