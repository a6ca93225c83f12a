#!/usr/bin/env python3
"""
Dependency provider functions for the application.
"""

from fastapi import Request
import httpx

from ai_stream.shared.config import RelayConfig

def get_http_client(request: Request) -> httpx.AsyncClient:
    """Returns the shared httpx.AsyncClient instance."""
    return request.app.state.http_client

def get_config(request: Request) -> RelayConfig:
    """Returns the configuration loaded at startup."""
    return request.app.state.config
