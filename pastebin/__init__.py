"""
Pastebin Backend - Application Package
=======================================

What: Marks the `pastebin` directory as a Python package.
Who:  Used by uvicorn (`pastebin.main:app`), Alembic and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (HTTP Surface)     │  ← form parsing, redirects, templates
    ├─────────────────────────────────────┤
    │         PasteService                │  ← identity checks, read-through cache
    ├──────────────────┬──────────────────┤
    │   PasteStore     │   PasteCache     │  ← SQLAlchemy (truth) / Redis (best-effort)
    └──────────────────┴──────────────────┘

    The service is built once at startup and handed to routes through
    FastAPI dependencies; nothing below the routes reads request state.
"""

__version__ = "1.0.0"
