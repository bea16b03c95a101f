"""Integrations module - External service connectors."""

from fusioncaller.integrations.vapi import VapiService, vapi_service

__all__ = [
    "VapiService",
    "vapi_service",
]
