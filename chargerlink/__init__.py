"""Validated commands and a bounded, thread-safe command queue for a multi-channel battery charger."""

__version__ = "0.1.0"
__all__ = ["commands", "link"]