"""Endpoint Registry - a moderated directory of API endpoints."""

__version__ = "0.4.0"
