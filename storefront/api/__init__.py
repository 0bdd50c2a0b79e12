"""API layer module.

Contains FastAPI routers and request/response schemas.
"""
