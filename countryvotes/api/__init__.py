"""
FastAPI backend for the country votes service.

This package contains the REST API layer: schemas (Pydantic DTOs),
services, routes, middleware, and error handling.
"""
