"""
Web application package for the N-Queens solve engine.

Provides the FastAPI job API (start a solve, poll its status) that the
browser visualizer talks to, with per-client rate limiting.
"""
