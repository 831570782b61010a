"""Assurance utilities such as structured logging."""

__all__ = ["logging"]

from . import logging  # noqa: F401
