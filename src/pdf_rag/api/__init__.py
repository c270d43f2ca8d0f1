"""
HTTP API.

Usage:
    from pdf_rag.api import create_app
"""

from .app import create_app, serve

__all__ = ["create_app", "serve"]
