"""Configuration module for the Logipad demo client."""
from .settings import AppConfig, load_settings

__all__ = ["AppConfig", "load_settings"]
