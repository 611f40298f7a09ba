"""Provision project folders from monday.com webhook events."""

__version__ = "0.1.0"
