"""
HTTP API for Parity.
"""
