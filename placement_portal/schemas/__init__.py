"""
Schemas module - Request/Response schemas for API endpoints.

All schemas live in schemas.py; import from there.
"""
