#!/usr/bin/env python3
# src/mcp_openapi_gateway/config/__init__.py
"""
Environment-driven gateway configuration.
"""

from .base import ConfigDetector
from .container_detector import ContainerDetector
from .settings import GatewayConfig, GatewayDetector

__all__ = ["ConfigDetector", "ContainerDetector", "GatewayConfig", "GatewayDetector"]
