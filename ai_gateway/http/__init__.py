"""HTTP API layer for the AI gateway.

Exposes a FastAPI ``router`` with provider discovery, key validation,
completion and streaming endpoints.
"""
