"""Exceptions raised for programmer errors (never for program text)."""
from __future__ import annotations


class PortingError(Exception):
    """Base class for porter exceptions."""


class InvalidOptionsError(PortingError, ValueError):
    """Raised when :class:`~qb64_porter.options.PortingOptions` cannot be built."""
