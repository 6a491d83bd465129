"""Booking lifecycle API for multi-tenant medical practices"""

__version__ = "1.0.0"
