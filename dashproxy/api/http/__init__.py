"""Helpers behind the FastAPI routes."""
