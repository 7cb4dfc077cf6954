"""FastAPI routers for the worker.

Routers are grouped by domain (live sessions, summarize, notes).
"""
