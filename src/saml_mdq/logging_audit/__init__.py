"""Logging setup for the saml-mdq CLI and for applications embedding the client."""

from .logger import configure_logging

__all__ = [
    "configure_logging",
]
