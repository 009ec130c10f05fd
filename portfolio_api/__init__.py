"""
Portfolio API package.

A FastAPI service serving the public portfolio and blog content, plus the
session-gated admin endpoints that manage it. Content lives in memory for
development or in any SQLAlchemy database (Postgres in production).
"""
