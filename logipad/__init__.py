"""Demonstration client for Keycloak and the Logipad identity API."""

__version__ = "0.1.0"
