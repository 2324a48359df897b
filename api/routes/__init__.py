"""
API routes package for Parity.
"""
from api.routes import comparison

__all__ = ["comparison"]
