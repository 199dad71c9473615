"""Core gameplay primitives (board model, layout conversions and the move engine).

Kept free of FastAPI concerns so it can be reused by API routes, sessions, and tests.
"""
