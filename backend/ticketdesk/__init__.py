"""Ticket Desk API package."""

__version__ = "2.0.0"
