"""
HTTP layer: FastAPI routes and page rendering.
"""
