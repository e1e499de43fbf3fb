"""
HTTP layer: router, shared dependencies, middleware and exception handlers.
"""
