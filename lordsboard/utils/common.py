"""Common utility functions for the dashboard backend."""

from typing import Any


def shorten_address(address: str, head: int = 6, tail: int = 4) -> str:
    """Shorten an address for display: '0x123456...abcd'.

    Handles addresses with or without the '0x' prefix.
    """
    if not address:
        return ""
    addr = address.lower()
    if addr.startswith("0x"):
        addr = addr[2:]
    if len(addr) < head + tail:
        return f"0x{addr}"
    return f"0x{addr[:head]}...{addr[-tail:]}"


def as_bool(value: Any, default: bool = False) -> bool:
    """Interpret config/env values such as 'true', '1', 'no'."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
