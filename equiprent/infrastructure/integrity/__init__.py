"""Integrity checking for denormalized links."""

from .checker import LinkIntegrityChecker

__all__ = ["LinkIntegrityChecker"]
