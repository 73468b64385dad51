"""
Presentation layer: FastAPI routes and dependencies.
"""
